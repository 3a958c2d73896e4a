"""
Shared module for common utilities used by the REST API, the cart store
and the CLI.

STRUCTURE:
- shared.config: Configuration
  - settings.py: Environment config (pydantic-settings)
  - logging.py: Structured logging, PII masking, security audit log
  - constants.py: PaymentStatus, OrderStatus, PaymentMethod, limits

- shared.infrastructure: Database and request plumbing
  - db.py: SQLAlchemy engine/sessions, get_db(), safe_commit()
  - correlation.py: X-Request-ID propagation into log records

- shared.security: Admin authentication helpers
  - password.py: Bcrypt hashing
  - tokens.py: Opaque bearer tokens (only the SHA-256 digest is stored)
  - rate_limit.py: slowapi limiter for login

- shared.utils: Utilities
  - exceptions.py: HTTP exceptions with auto-logging
  - validators.py: Input sanitization, money/minor-unit conversion
  - schemas.py: Pydantic request/response schemas

IMPORT EXAMPLES:
    from shared.infrastructure.db import get_db, safe_commit
    from shared.config.settings import settings
    from shared.config.constants import PaymentStatus, OrderStatus
    from shared.utils.exceptions import NotFoundError, ValidationError
    from shared.utils.validators import to_minor_units
"""
