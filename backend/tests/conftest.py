import os

# Settings are read at import time, so the environment must be in place first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ["IDP_JWT_SECRET"] = "test-secret-key-for-session-tokens-0123456789"
os.environ["BOOTSTRAP_ADMIN_SUBJECTS"] = "user_bootstrap_admin"
os.environ.pop("CLERK_JWKS_URL", None)
os.environ.pop("CLERK_ISSUER", None)
