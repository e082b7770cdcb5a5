"""Checkout stage navigation — commands and handler.

Advancing out of review places the order, which is asynchronous; that step
goes through ``checkout.submission.placement.place_order`` instead of a
command.
"""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from checkout.domain import checkout
from checkout.session.session import CheckoutSession, CheckoutStage


@checkout.command(part_of="CheckoutSession")
class AdvanceCheckout:
    session_id = Identifier(required=True)


@checkout.command(part_of="CheckoutSession")
class RetreatCheckout:
    session_id = Identifier(required=True)


@checkout.command(part_of="CheckoutSession")
class ReturnToStage:
    """Jump back to an earlier stage, as the review screen's edit links do."""

    session_id = Identifier(required=True)
    stage = String(required=True, choices=CheckoutStage)


@checkout.command_handler(part_of=CheckoutSession)
class CheckoutStagesHandler:
    @handle(AdvanceCheckout)
    def advance_checkout(self, command):
        repo = current_domain.repository_for(CheckoutSession)
        session = repo.get(command.session_id)
        stage = session.advance()
        repo.add(session)
        return stage.value

    @handle(RetreatCheckout)
    def retreat_checkout(self, command):
        repo = current_domain.repository_for(CheckoutSession)
        session = repo.get(command.session_id)
        stage = session.retreat()
        repo.add(session)
        return stage.value

    @handle(ReturnToStage)
    def return_to_stage(self, command):
        repo = current_domain.repository_for(CheckoutSession)
        session = repo.get(command.session_id)
        stage = session.return_to(command.stage)
        repo.add(session)
        return stage.value
