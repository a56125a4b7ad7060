# Infrastructure Layer
# ====================
# Contains all external service integrations:
# - config/: Environment and settings management
# - persistence/: SQLite customer/review store with cached aggregates
# - llm/: OpenAI-compatible post title generation
# - publishing/: Reddit publisher (and a dry-run publisher for development)
#
# This layer can be replaced entirely without affecting domain/application layers.
