# Supabase table: client_notes (clients themselves are rows in profiles)
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

client_notes:
- id: uuid (primary key, default: gen_random_uuid())
- client_id: uuid (references profiles.id on delete cascade, not null)
- author_id: uuid (references profiles.id, not null) - the admin who wrote it
- body: text (not null)
- created_at: timestamp (default: now())
- updated_at: timestamp (nullable)

RLS: admins only. Notes are never visible to the client.
"""
