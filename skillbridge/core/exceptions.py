"""Domain exceptions."""


class SkillBridgeError(Exception):
    """Base class for application errors."""


class PersistenceError(SkillBridgeError):
    """The backing store could not record a write (store or network unavailable)."""


class RoadmapGenerationError(SkillBridgeError):
    """The generation service returned nothing usable as a roadmap graph."""


class QuizGenerationError(SkillBridgeError):
    """The generation service returned nothing usable as a quiz."""
