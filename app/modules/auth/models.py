# Supabase Auth
# This module uses Supabase's built-in authentication system
# No custom tables are required - Supabase Auth handles:
# - User registration (auth.users table)
# - User login and session management
# - JWT token generation and validation

"""
Supabase Auth provides:
- auth.sign_up() - Register new clients
- auth.sign_in_with_password() - Authenticate clients and admins
- auth.get_user() - Get current user from JWT token
- auth.sign_out() - Logout users

Application-level identity (company, client_id, is_admin) lives in the
public.profiles table, kept in sync on every sign-in. See profiles/models.py.
"""
