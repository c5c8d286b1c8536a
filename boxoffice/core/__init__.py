"""
Core utilities shared across the boxoffice backend.

This package hosts:
- configuration helpers (env vars, storage paths)
- cross-cutting adapters such as password hashing, the e-mail mailer and the
  per-IP rate limiter.

Services and routers depend on these primitives instead of reading
os.environ or talking to SMTP directly.
"""
