# Application Layer
# =================
# Use cases and orchestration (no business rules):
# - validation: materializes review submissions before any write
# - reputation_service: lookup, review CRUD, sharing, aggregate refresh
# - factory: wires collaborators from settings

from .reputation_service import ReputationService
from .validation import ReviewDraft, validate_submission, validate_update
from .factory import build_service
