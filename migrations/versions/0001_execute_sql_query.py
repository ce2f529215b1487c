"""create execute_sql_query routine

Revision ID: 0001
Revises:
Create Date: 2026-10-19
"""
from alembic import op

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


# Runs any SELECT and returns its rows as one JSON array ('[]' when empty)
def upgrade():
    op.execute(
        """
        CREATE OR REPLACE FUNCTION public.execute_sql_query(query text)
        RETURNS json
        LANGUAGE plpgsql
        AS $$
        DECLARE
            result json;
        BEGIN
            EXECUTE format(
                'SELECT coalesce(json_agg(t), ''[]''::json) FROM (%s) t',
                query
            ) INTO result;
            RETURN result;
        END;
        $$
        """
    )


def downgrade():
    op.execute("DROP FUNCTION IF EXISTS public.execute_sql_query(text)")
