# © Copyright IBM Corporation 2025
# SPDX-License-Identifier: Apache-2.0


from websearch_core.emitter import Event


class StrategyAttemptEvent(Event):
    strategy: str
    query: str
    attempt: int


class StrategySucceededEvent(Event):
    strategy: str
    query: str
    result_count: int
    elapsed_ms: float


class StrategyFailedEvent(Event):
    strategy: str
    query: str
    error: str
    circuit_open: bool = False


class CacheHitEvent(Event):
    query: str
    strategy: str | None = None
    result_count: int


class CircuitResetEvent(Event):
    strategy: str
    reason: str


class SearchRoundEvent(Event):
    query: str
    round: int
    accepted: int
    total_score: float

    def to_markdown(self) -> str:
        return f"**Round {self.round}**  \n{self.accepted} results, score {self.total_score:.2f} for `{self.query}`"
