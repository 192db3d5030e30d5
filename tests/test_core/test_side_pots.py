"""
Tests for main pot and side pot construction.
"""

from cardpt.core.game import create_engine
from cardpt.core.player import Player, PlayerStatus
from cardpt.core.rules import distribute_odd_chips
from cardpt.core.state import GameConfig, Pot, compute_pots


def make_players(commitments, statuses=None):
    statuses = statuses or {}
    players = []
    for seat, committed in enumerate(commitments):
        player = Player(seat=seat, stack=0, total_committed=committed)
        player.status = statuses.get(seat, PlayerStatus.ACTIVE)
        players.append(player)
    return players


class TestComputePots:
    """Tests for compute_pots."""

    def test_single_pot(self):
        pots = compute_pots(make_players([100, 100, 100, 0, 0, 0], {
            3: PlayerStatus.FOLDED, 4: PlayerStatus.FOLDED, 5: PlayerStatus.FOLDED,
        }))
        assert pots == [Pot(amount=300, eligible_seats=[0, 1, 2])]

    def test_three_levels(self):
        """Two short all-ins create a main pot and two side pots."""
        players = make_players([100, 50, 100, 0, 100, 25], {
            1: PlayerStatus.ALL_IN,
            3: PlayerStatus.OUT,
            5: PlayerStatus.ALL_IN,
        })
        pots = compute_pots(players)
        assert pots == [
            Pot(amount=125, eligible_seats=[0, 1, 2, 4, 5]),
            Pot(amount=100, eligible_seats=[0, 1, 2, 4]),
            Pot(amount=150, eligible_seats=[0, 2, 4]),
        ]
        assert sum(p.amount for p in pots) == sum(p.total_committed for p in players)

    def test_folded_chips_stay_in_pot(self):
        """A folded player's chips count but the player is never eligible."""
        pots = compute_pots(make_players([50, 100, 100, 0, 0, 0], {
            0: PlayerStatus.FOLDED, 1: PlayerStatus.ALL_IN,
        }))
        assert pots == [
            Pot(amount=150, eligible_seats=[1, 2]),
            Pot(amount=100, eligible_seats=[1, 2]),
        ]

    def test_same_contenders_split_pot_by_pot(self):
        """Two odd pots with the same three contenders each hand out their own odd chips."""
        pots = compute_pots(make_players([0, 102, 102, 102, 100, 102], {
            4: PlayerStatus.FOLDED, 5: PlayerStatus.FOLDED,
        }))
        assert pots == [
            Pot(amount=500, eligible_seats=[1, 2, 3]),
            Pot(amount=8, eligible_seats=[1, 2, 3]),
        ]

        won = {1: 0, 2: 0, 3: 0}
        for pot in pots:
            for seat, chips in distribute_odd_chips(pot.amount, pot.eligible_seats, 0).items():
                won[seat] += chips
        assert won == {1: 170, 2: 170, 3: 168}

    def test_dead_level_merges_down(self):
        """Chips above every live player's level go to the pot below."""
        pots = compute_pots(make_players([200, 100, 100, 0, 0, 0], {
            0: PlayerStatus.FOLDED, 1: PlayerStatus.ALL_IN,
        }))
        assert pots == [Pot(amount=400, eligible_seats=[1, 2])]

    def test_uncalled_excess_is_its_own_pot(self):
        pots = compute_pots(make_players([300, 100, 0, 0, 0, 0], {
            1: PlayerStatus.ALL_IN,
        }))
        assert pots == [
            Pot(amount=200, eligible_seats=[0, 1]),
            Pot(amount=200, eligible_seats=[0]),
        ]

    def test_nothing_committed(self):
        assert compute_pots(make_players([0] * 6)) == []


class TestSidePotsInPlay:
    """Side pots built by the engine during a hand."""

    def test_three_way_all_in(self, act):
        engine = create_engine(GameConfig(
            seed="sidepots", starting_stacks=[1000, 100, 300, 1000, 1000, 1000],
        ))
        act(engine, "raise", 1000)
        for _ in range(3):
            act(engine, "fold")
        act(engine, "call")
        act(engine, "call")

        state = engine.state
        assert engine.get_legal_actions() == []
        assert len(state.board) == 5
        assert [(p.amount, p.eligible_seats) for p in state.pots] == [
            (300, [1, 2, 3]),
            (400, [2, 3]),
            (700, [3]),
        ]
        assert sum(p.stack for p in state.players) == 4400
        assert state.players[3].stack >= 700

    def test_awards_match_pots(self, act):
        engine = create_engine(GameConfig(
            seed="sidepots", starting_stacks=[1000, 100, 300, 1000, 1000, 1000],
        ))
        act(engine, "raise", 1000)
        for _ in range(3):
            act(engine, "fold")
        act(engine, "call")
        act(engine, "call")

        summary = [e for e in engine.events if e.type.value == "hand_summary"][-1]
        for pot_summary, pot in zip(summary.data["pots"], engine.state.pots):
            assert sum(w["amount"] for w in pot_summary["winners"]) == pot.amount
            assert all(w["seat"] in pot.eligible_seats for w in pot_summary["winners"])
