"""MySQL access. Table definitions ship as ``schema.sql`` in this package; apply it
with the mysql client (``mysql -u <user> -p <database> < schema.sql``) before the first start."""
