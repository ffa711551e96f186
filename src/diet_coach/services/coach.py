"""Coaching advice and questions backed by the reasoning service."""

import logging
from dataclasses import dataclass, field
from typing import Protocol

from diet_coach.domain.coach import AgentDecision
from diet_coach.services.ledger import Ledger
from diet_coach.services.parsing import default_decision, parse_decision
from diet_coach.services.prompts import (
    build_advice_input,
    build_advice_instructions,
    build_question_instructions,
)

RELAY_FAILURE_ANSWER = "Communication relay failure. Verify API connection."

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CoachReply:
    """Raw text reply plus any cited links."""

    text: str
    references: list[dict[str, str]] = field(default_factory=list)


class CoachClient(Protocol):
    """Interface for LLM text generation."""

    async def generate(  # noqa: PLR0913
        self,
        *,
        model: str,
        reasoning_effort: str | None,
        store: bool,
        instructions: str,
        prompt: str,
        web_search: bool,
    ) -> CoachReply:
        """Return the model's reply for the given instructions and input."""


@dataclass
class DecisionBoard:
    """Latest decision per identity.

    Writes are unconditional: a slow reply that lands after a newer one
    replaces it.
    """

    decisions: dict[str, AgentDecision] = field(default_factory=dict)
    pending: dict[str, int] = field(default_factory=dict)

    def get(self, identity: str) -> AgentDecision | None:
        return self.decisions.get(identity)

    def set(self, identity: str, decision: AgentDecision) -> None:
        self.decisions[identity] = decision

    def clear(self, identity: str) -> None:
        self.decisions.pop(identity, None)

    def is_thinking(self, identity: str) -> bool:
        """Return True while an advice call for the identity is outstanding."""
        return self.pending.get(identity, 0) > 0

    def begin(self, identity: str) -> None:
        self.pending[identity] = self.pending.get(identity, 0) + 1

    def end(self, identity: str) -> None:
        remaining = self.pending.get(identity, 0) - 1
        if remaining > 0:
            self.pending[identity] = remaining
        else:
            self.pending.pop(identity, None)


@dataclass
class CoachService:
    """Service that turns ledger state into advice and answers."""

    client: CoachClient
    model: str
    reasoning_effort: str | None
    store: bool
    web_search: bool = True
    board: DecisionBoard = field(default_factory=DecisionBoard)

    async def refresh(self, ledger: Ledger) -> AgentDecision | None:
        """Regenerate advice for the ledger.

        An empty ledger skips the call and clears the previous decision.
        Failures of the call are logged and replaced by the default decision.
        """
        identity = ledger.identity
        if not ledger.meals:
            self.board.clear(identity)
            return None

        instructions = build_advice_instructions(ledger.profile)
        prompt = build_advice_input(ledger.profile, ledger.meals, ledger.totals)
        self.board.begin(identity)
        try:
            reply = await self.client.generate(
                model=self.model,
                reasoning_effort=self.reasoning_effort,
                store=self.store,
                instructions=instructions,
                prompt=prompt,
                web_search=self.web_search,
            )
        except Exception:
            _logger.exception("Advice generation failed", extra={"identity": identity})
            decision = default_decision()
        else:
            decision = parse_decision(reply.text, reply.references)
        finally:
            self.board.end(identity)

        self.board.set(identity, decision)
        return decision

    def latest(self, identity: str) -> AgentDecision | None:
        """Return the most recently stored decision for an identity."""
        return self.board.get(identity)

    async def ask(self, ledger: Ledger, question: str) -> str:
        """Answer a free-form question in the context of today's intake."""
        try:
            reply = await self.client.generate(
                model=self.model,
                reasoning_effort=self.reasoning_effort,
                store=self.store,
                instructions=build_question_instructions(ledger.profile, ledger.totals),
                prompt=question,
                web_search=False,
            )
        except Exception:
            _logger.exception(
                "Question answering failed", extra={"identity": ledger.identity}
            )
            return RELAY_FAILURE_ANSWER
        return reply.text.strip() or RELAY_FAILURE_ANSWER
