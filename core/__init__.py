# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains the Glass domain logic:
# - models/: Pydantic schemas for labs, teams, requests and collaborations
# - validation.py: Payload validation reduced to the first issue
# - mapping.py: Storage rows <-> entities
# - services/: Stores that persist entities and their child collections
#
# Stores take the Supabase client as a constructor argument, so everything
# here runs against an in-memory fake in tests.
# =============================================================================
