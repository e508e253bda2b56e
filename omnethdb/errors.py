"""Exception hierarchy for memory store operations."""

from __future__ import annotations


class OmnethError(Exception):
    """Base class for every error raised by the package."""

    default_message = "omnethdb error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class InvalidSpaceIDError(OmnethError, ValueError):
    default_message = "invalid space id"


class InvalidMemoryIDError(OmnethError, ValueError):
    default_message = "invalid memory id"


class InvalidContentError(OmnethError, ValueError):
    default_message = "invalid content"


class InvalidActorIDError(OmnethError, ValueError):
    default_message = "invalid actor id"


class InvalidActorKindError(OmnethError, ValueError):
    default_message = "invalid actor kind"


class InvalidMemoryKindError(OmnethError, ValueError):
    default_message = "invalid memory kind"


class InvalidConfidenceError(OmnethError, ValueError):
    default_message = "invalid confidence"


class InvalidTrustLevelError(OmnethError, ValueError):
    default_message = "invalid trust level"


class InvalidDimensionError(OmnethError, ValueError):
    default_message = "invalid dimension"


class InvalidDefaultWeightError(OmnethError, ValueError):
    default_message = "invalid default weight"


class InvalidHalfLifeError(OmnethError, ValueError):
    default_message = "invalid half life"


class InvalidMemoryVersionError(OmnethError, ValueError):
    default_message = "invalid memory version"


class InvalidWritersPolicyError(OmnethError, ValueError):
    default_message = "invalid writers policy"


class InvalidSpaceConfigError(OmnethError, ValueError):
    default_message = "invalid space config"


class InvalidSpaceWritePolicyError(OmnethError, ValueError):
    default_message = "invalid space write policy"


class InvalidSpaceInitError(OmnethError, ValueError):
    default_message = "invalid space init"


class NilEmbedderError(OmnethError, ValueError):
    default_message = "nil embedder"


class EmbedderUnavailableError(OmnethError):
    default_message = "embedder unavailable"


class EmbeddingModelMismatchError(OmnethError):
    default_message = "embedding model mismatch"


class SpaceMigratingError(OmnethError):
    default_message = "space is migrating"


class StoreClosedError(OmnethError):
    default_message = "store closed"


class ConflictError(OmnethError):
    default_message = "write conflict"


class MemoryNotFoundError(OmnethError, LookupError):
    default_message = "memory not found"


class SpaceNotFoundError(OmnethError, LookupError):
    default_message = "space not found"


class LineageActiveError(OmnethError):
    default_message = "lineage is active"


class ReviveDerivedUnsupportedError(OmnethError):
    default_message = "revive for derived lineages is not supported"


class InvalidRelationsError(OmnethError, ValueError):
    default_message = "invalid relations"


class PolicyViolationError(OmnethError):
    default_message = "policy violation"


class CorpusLimitError(OmnethError):
    default_message = "corpus limit reached"


class UpdateTargetNotFoundError(OmnethError, LookupError):
    default_message = "update target not found"


class UpdateTargetNotLatestError(OmnethError):
    default_message = "update target is not latest"


class UpdateTargetForgottenError(OmnethError):
    default_message = "update target is forgotten"


class UpdateAcrossSpacesError(OmnethError):
    default_message = "update target is in a different space"


class UpdateAcrossKindsError(OmnethError):
    default_message = "update target has a different kind"


class ExtendsTargetNotFoundError(OmnethError, LookupError):
    default_message = "extends target not found"


class ExtendsTargetNotLatestError(OmnethError):
    default_message = "extends target is not latest"


class ExtendsTargetForgottenError(OmnethError):
    default_message = "extends target is forgotten"


class ExtendsAcrossSpacesError(OmnethError):
    default_message = "extends target is in a different space"


class DerivedSourceCountError(OmnethError):
    default_message = "derived memory requires at least two distinct sources"


class DerivedSourceNotFoundError(OmnethError, LookupError):
    default_message = "derived source not found"


class DerivedSourceNotLatestError(OmnethError):
    default_message = "derived source is not latest"


class DerivedSourceForgottenError(OmnethError):
    default_message = "derived source is forgotten"


class DerivedAcrossSpacesError(OmnethError):
    default_message = "derived source is in a different space"


class DerivedSourceKindError(OmnethError):
    default_message = "derived source has invalid kind"


class DerivedRationaleError(OmnethError):
    default_message = "derived rationale is required"


class DerivedActorKindError(OmnethError):
    default_message = "derived actor kind is not allowed"