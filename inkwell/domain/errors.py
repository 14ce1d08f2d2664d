from typing import Literal

# Error kinds shared by every component output.
# not_found -> 404, validation -> 422, persistence -> 500
ErrorKind = Literal["not_found", "validation", "persistence"]

GENERIC_PERSISTENCE_MESSAGE = "Something went wrong while saving. Please try again."
