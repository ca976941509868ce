# Supabase tables: profiles, auth.users
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

profiles:
- id: uuid (primary key, references auth.users.id on delete cascade)
- full_name: text (nullable)
- email: text (nullable) - synced from auth.users
- company: text (nullable)
- client_id: text (nullable) - stable client reference, generated on first sign-in
- is_admin: boolean (default: false) - only ever set from the database side
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())

RLS: users can select/insert/update their own row; admins read all rows
through the service role client.
"""
