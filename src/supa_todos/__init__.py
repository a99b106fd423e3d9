"""Terminal task list backed by Supabase auth and a `tasks` table."""

__version__ = "0.1.0"
