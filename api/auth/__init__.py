"""
Admin access control: JWT verification for moderation endpoints.
"""
