"""Errors raised by the schedule and bracket generators."""


class MatchCoreError(Exception):
    """Base class for every error the generators raise."""


# -- Roster / configuration ----------------------------------------------------

class InsufficientParticipants(MatchCoreError, ValueError):
    """Roster is below the minimum for the requested game type."""

    def __init__(self, required: int, given: int):
        self.required = required
        self.given = given
        super().__init__(f"At least {required} participants are required, got {given}")


class DuplicateParticipant(MatchCoreError, ValueError):
    """The same participant appears more than once in a roster."""

    def __init__(self, participant: str):
        self.participant = participant
        super().__init__(f"Participant listed more than once: {participant!r}")


class InvalidConfiguration(MatchCoreError, ValueError):
    pass


class NoTeamsConfigured(MatchCoreError, ValueError):
    """Manual assignment was requested without any teams."""

    def __init__(self):
        super().__init__("Manual assignment needs at least one team")


# -- Results -------------------------------------------------------------------

class MatchNotFound(MatchCoreError, LookupError):
    def __init__(self, round_index: int, match_index: int):
        self.round_index = round_index
        self.match_index = match_index
        super().__init__(f"No match {match_index} in round {round_index}")


class InvalidScore(MatchCoreError, ValueError):
    pass
