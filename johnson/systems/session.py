"""
ContractSession: one player working one contract at a time.

Ties the pieces together the way a UI drives them:
    load_contract → select/deselect + hire/unhire (preview recomputes)
                  → begin_resolution → step through events → complete

The session owns the selection list, the roster and the player ledger.
The pool preview is recomputed from scratch whenever any of them
change; nothing is patched incrementally.
"""

from __future__ import annotations

import logging
from typing import Iterable

from ..state.config import BalancingConfig
from ..state.event_bus import EventType, get_event_bus
from ..state.schema import Contract, PlayerState, Runner
from ..state.schemas.resolution_result import ResolutionSummary
from ..tools.dice import Dice
from .availability import compute_availability
from .damage_table import DamageTable, default_damage_table
from .pools import PoolBreakdown, recompute_pools
from .resolution import ContractResolver, ResolutionError, ResolutionPhase
from .roster import HireResult, Roster

logger = logging.getLogger(__name__)


class ContractSession:
    """Facade over pools, availability, roster and resolution."""

    def __init__(
        self,
        config: BalancingConfig | None = None,
        player: PlayerState | None = None,
        runners: Iterable[Runner] = (),
        table: DamageTable | None = None,
        dice: Dice | None = None,
    ):
        self.config = config or BalancingConfig()
        self.player = player or PlayerState(money=self.config.player_starting_money)
        self.roster = Roster(self.config, runners)
        self.table = table if table is not None else default_damage_table()
        self.dice = dice or Dice()

        self._contract: Contract | None = None
        self._selected: list[str] = []
        self._preview: PoolBreakdown | None = None
        self._resolver: ContractResolver | None = None
        self._bus = get_event_bus()

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def contract(self) -> Contract | None:
        return self._contract

    @property
    def selected(self) -> list[str]:
        """Selected node ids in selection order."""
        return list(self._selected)

    @property
    def resolving(self) -> bool:
        """True once a resolver has started stepping and until it completes."""
        return self._resolver is not None and self._resolver.phase not in (
            ResolutionPhase.IDLE,
            ResolutionPhase.COMPLETE,
        )

    def _contract_id(self) -> str:
        return self._contract.id if self._contract else ""

    def _require_idle(self, attempted: str) -> None:
        if self.resolving:
            raise ResolutionError(f"Cannot {attempted} while a contract is resolving")

    def _invalidate(self) -> None:
        self._preview = None

    def load_contract(self, contract: Contract) -> None:
        """Make a contract current and start with nothing selected."""
        self._require_idle("load a contract")
        self._contract = contract
        self._selected = []
        self._invalidate()
        logger.info("Loaded contract %s (%d nodes)", contract.id, len(contract.nodes))
        self._bus.emit(
            EventType.CONTRACT_LOADED,
            contract_id=contract.id,
            name=contract.name,
            nodes=len(contract.nodes),
        )

    def add_runner(self, runner: Runner) -> Runner:
        self._require_idle("add runners")
        self._invalidate()
        return self.roster.add(runner)

    # -------------------------------------------------------------------------
    # Selection
    # -------------------------------------------------------------------------

    def availability(self) -> dict[str, bool]:
        return compute_availability(self._contract, self._selected, self.roster.hired_runners())

    def select(self, node_id: str) -> bool:
        """Select an available node. Returns False if it is not selectable."""
        self._require_idle("select nodes")
        if not self.availability().get(node_id, False):
            logger.debug("Node %s is not available", node_id)
            return False

        self._selected.append(node_id)
        self._invalidate()
        self._bus.emit(EventType.NODE_SELECTED, contract_id=self._contract_id(), node_id=node_id)
        return True

    def deselect(self, node_id: str) -> bool:
        self._require_idle("deselect nodes")
        if node_id not in self._selected:
            return False

        self._selected.remove(node_id)
        self._invalidate()
        self._bus.emit(EventType.NODE_DESELECTED, contract_id=self._contract_id(), node_id=node_id)
        return True

    def set_selection(self, node_ids: Iterable[str]) -> None:
        """
        Replace the selection wholesale, e.g. from a saved scenario.

        Availability is not re-checked; unknown ids are kept but never match.
        """
        self._require_idle("change the selection")
        self._selected = list(dict.fromkeys(node_ids))
        self._invalidate()

    # -------------------------------------------------------------------------
    # Hiring
    # -------------------------------------------------------------------------

    def hire(self, runner_id: str) -> HireResult:
        self._require_idle("hire runners")
        result = self.roster.hire(runner_id, self.player)
        if result.success:
            self._invalidate()
        return result

    def unhire(self, runner_id: str) -> HireResult:
        self._require_idle("release runners")
        result = self.roster.unhire(runner_id, self.player)
        if result.success:
            self._invalidate()
        return result

    # -------------------------------------------------------------------------
    # Preview
    # -------------------------------------------------------------------------

    @property
    def preview(self) -> PoolBreakdown:
        """Current pool, recomputed only after something changed."""
        if self._preview is None:
            self._preview = recompute_pools(
                self._contract,
                self._selected,
                self.roster.hired_runners(),
                self.config.multiplicative_policy,
            )
            self._bus.emit(
                EventType.POOLS_RECOMPUTED,
                contract_id=self._contract_id(),
                **self._preview.as_dict(),
            )
        return self._preview

    # -------------------------------------------------------------------------
    # Resolution
    # -------------------------------------------------------------------------

    def begin_resolution(self, seed: int | None = None) -> ContractResolver:
        """
        Freeze the preview and hand back a resolver to step through.

        Raises:
            ResolutionError: No contract loaded, or one is already resolving
        """
        if self._contract is None:
            raise ResolutionError("No contract loaded")
        self._require_idle("start another resolution")

        dice = Dice(seed) if seed is not None else self.dice
        self._resolver = ContractResolver(
            breakdown=self.preview,
            runners=self.roster.hired_runners(),
            player=self.player,
            table=self.table,
            config=self.config,
            dice=dice,
            contract_id=self._contract.id,
            on_complete=self._finish,
        )
        return self._resolver

    def resolve(self, seed: int | None = None) -> ResolutionSummary:
        """Resolve the current contract in one go."""
        return self.begin_resolution(seed).resolve()

    def _finish(self, summary: ResolutionSummary) -> None:
        # Runners go home and the tree resets for the next contract
        self.roster.release_all()
        self._selected = []
        self._invalidate()
        logger.debug("Session reset after contract %s", summary.contract_id)
