# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the Glass API:
# - fakes.py: In-memory Supabase client used by every test
# - test_models.py / test_mapping.py: Schemas and row mapping
# - test_child_collections.py: Child collection replacement
# - test_team_store.py / test_lab_store.py: Aggregate persistence
# - test_lab_requests.py: Requests, collaborations and their endpoints
# - test_routes.py: Lab and team endpoints, auth, errors, health
#
# Run tests with: pytest
# =============================================================================
