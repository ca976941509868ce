# Supabase table: assets, storage bucket: assets
# This file documents the expected database schema
# Actual operations are handled via Supabase SDK in service.py

"""
Expected Supabase table structure:

assets:
- id: uuid (primary key, default: gen_random_uuid())
- user_id: uuid (references profiles.id, not null) - the client the asset was delivered to
- label: text (not null) - free text, also drives library categorization
- description: text (nullable) - may carry a hex/rgb value for brand colors
- file_path: text (not null) - object key in the assets bucket: {user_id}/{epoch_ms}-{filename}
- file_size: bigint (nullable)
- mime_type: text (nullable)
- created_at: timestamp (default: now())

The bucket is private; the library hands out signed URLs.
"""
