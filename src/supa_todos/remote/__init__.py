"""
Remote service backends.

- supabase_backend.py: hosted Supabase project (auth + `tasks` table)
- memory_backend.py: offline demo stand-in with the same behaviour
"""
