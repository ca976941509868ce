# Supabase table: requests
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

requests:
- id: uuid (primary key, default: gen_random_uuid())
- user_id: uuid (references profiles.id, not null) - the client who submitted the brief
- type: text (brand | website | product)
- title: text (not null)
- payload: jsonb - the full brief as submitted
- status: text (pending | in_progress | completed | delivered, default: pending)
- created_at: timestamp (default: now())
- updated_at: timestamp (default: now())

RLS: owner-or-admin on select; owner on insert; admin on update.
"""
