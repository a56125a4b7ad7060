# Welp - Customer Reputation Engine
# =================================
# Service workers rate patrons; ratings fold into a per-customer reputation
# profile that other businesses look up by phone number.
#
# ARCHITECTURE LAYERS:
# - Presentation:   FastAPI JSON API and maintenance CLI
# - Application:    Use cases and orchestration (no business rules)
# - Domain:         Pure business logic (no external dependencies)
# - Infrastructure: External services (SQLite, LLM, Reddit)
#
# Raw phone numbers are never stored; customers are keyed by a one-way digest.
