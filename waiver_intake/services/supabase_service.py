from supabase import create_client

def init_supabase(app):
    """Supabase client for storage + the waivers table, or None when not configured."""
    url = app.config.get('SUPABASE_URL')
    service_key = app.config.get('SUPABASE_SERVICE_ROLE_KEY')
    key = service_key or app.config.get('SUPABASE_KEY')

    if not url or not key:
        return None

    if not service_key:
        app.logger.warning("SUPABASE_SERVICE_ROLE_KEY not set: waiver uploads/inserts use the anon key and depend on RLS policies")

    return create_client(url, key)
