"""SQL queries used to read column metadata from the catalog."""

COLUMNS_QUERY = """
SELECT
  c.column_name,
  c.data_type,
  c.is_nullable,
  c.table_name,
  COALESCE(pgd.description, '') AS column_comment
FROM information_schema.columns AS c
LEFT JOIN pg_catalog.pg_namespace AS n
  ON n.nspname = c.table_schema
LEFT JOIN pg_catalog.pg_class AS cls
  ON cls.relname = c.table_name
  AND cls.relnamespace = n.oid
LEFT JOIN pg_catalog.pg_attribute AS a
  ON a.attrelid = cls.oid
  AND a.attname = c.column_name
LEFT JOIN pg_catalog.pg_description AS pgd
  ON pgd.objoid = cls.oid
  AND pgd.objsubid = a.attnum
WHERE c.table_schema = COALESCE(%(schema)s::text, current_schema())
  AND (%(tables)s::text[] IS NULL OR c.table_name = ANY(%(tables)s::text[]))
ORDER BY c.table_name ASC, c.ordinal_position ASC;
"""
