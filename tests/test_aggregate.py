"""
Tests for aggregate rankings.

Focus on normalization, ordering and the pooled cross-judge replay.
"""

import pytest

from pairwise_judging.exceptions import UnknownParticipantError
from pairwise_judging.models import Comparison, Feedback, Participant, Rating, StoreContents
from pairwise_judging.rankers.aggregate import UNIFORM_SCORE, normalize, pooled_ranking, rank


def participant(pid: str, seed: bool = False) -> Participant:
    return Participant(id=pid, project_name=f"Project {pid}", seed=seed)


class TestNormalize:
    """Test strength to score normalization."""

    def test_endpoints_map_to_0_and_100(self) -> None:
        strengths = [-0.5, 0.1, 0.5]
        assert normalize(-0.5, strengths) == 0
        assert normalize(0.5, strengths) == 100

    def test_rounds_half_up(self) -> None:
        assert normalize(0.125, [0.0, 1.0]) == 13
        assert normalize(-0.75, [-1.0, 1.0]) == 13
        assert normalize(0.375, [0.0, 1.0]) == 38

    def test_equal_strengths_give_uniform_score(self) -> None:
        assert normalize(0.0, [0.0, 0.0, 0.0]) == UNIFORM_SCORE


class TestRank:
    """Test ranking of a single population."""

    def test_sorted_by_score_descending(self) -> None:
        # Arrange
        people = [participant("a"), participant("b"), participant("c")]
        ratings = {
            "a": Rating(strength=-0.3),
            "b": Rating(strength=0.4),
            "c": Rating(strength=0.0),
        }

        # Act
        ranked = rank(ratings, people)

        # Assert
        assert [e.participant.id for e in ranked] == ["b", "c", "a"]
        assert [e.score for e in ranked] == [100, 43, 0]

    def test_ties_keep_input_order(self) -> None:
        # Arrange
        people = [participant("z"), participant("y"), participant("x")]
        ratings = {pid: Rating() for pid in ["x", "y", "z"]}

        # Act
        ranked = rank(ratings, people)

        # Assert
        assert [e.participant.id for e in ranked] == ["z", "y", "x"]
        assert {e.score for e in ranked} == {UNIFORM_SCORE}

    def test_empty_population(self) -> None:
        assert rank({}, []) == []

    def test_missing_rating_fails_loudly(self) -> None:
        with pytest.raises(UnknownParticipantError):
            _ = rank({"a": Rating()}, [participant("a"), participant("b")])


class TestPooledRanking:
    """Test the cross-judge leaderboard."""

    def test_replays_votes_in_timestamp_order(self) -> None:
        """Storage order does not matter, timestamps do."""
        # Arrange
        people = [participant("a"), participant("b"), participant("c")]
        votes = [
            Comparison(winner_id="a", loser_id="b", timestamp=1.0),
            Comparison(winner_id="b", loser_id="c", timestamp=2.0),
            Comparison(winner_id="c", loser_id="a", timestamp=3.0),
        ]
        shuffled = StoreContents(participants=people, comparisons=[votes[2], votes[0], votes[1]])
        ordered = StoreContents(participants=people, comparisons=votes)

        # Act
        from_shuffled = pooled_ranking(shuffled, min_visible=0)
        from_ordered = pooled_ranking(ordered, min_visible=0)

        # Assert
        assert [(e.participant.id, e.score) for e in from_shuffled.entries] == [
            (e.participant.id, e.score) for e in from_ordered.entries
        ]
        assert from_ordered.entries[0].participant.id == "c"

    def test_different_chronology_can_change_the_ranking(self) -> None:
        """Same votes, different timestamps: the pooled leader may differ."""
        # Arrange
        people = [participant("a"), participant("b"), participant("c")]
        first = StoreContents(participants=people, comparisons=[
            Comparison(winner_id="a", loser_id="b", timestamp=1.0),
            Comparison(winner_id="b", loser_id="c", timestamp=2.0),
            Comparison(winner_id="c", loser_id="a", timestamp=3.0),
        ])
        second = StoreContents(participants=people, comparisons=[
            Comparison(winner_id="a", loser_id="b", timestamp=3.0),
            Comparison(winner_id="b", loser_id="c", timestamp=1.0),
            Comparison(winner_id="c", loser_id="a", timestamp=2.0),
        ])

        # Act
        leader_first = pooled_ranking(first, min_visible=0).entries[0].participant.id
        leader_second = pooled_ranking(second, min_visible=0).entries[0].participant.id

        # Assert
        assert leader_first != leader_second

    def test_only_visible_participants_are_ranked(self) -> None:
        """Seeds are dropped once enough real participants exist, along with their votes."""
        # Arrange
        real = [participant(f"r{i}") for i in range(3)]
        seeds = [participant(f"s{i}", seed=True) for i in range(3)]
        contents = StoreContents(
            participants=[*real, *seeds],
            comparisons=[
                Comparison(winner_id="s0", loser_id="r0", timestamp=1.0),
                Comparison(winner_id="r1", loser_id="r0", timestamp=2.0),
            ],
            feedback={"r1": Feedback(strengths=["Solid"])},
        )

        # Act
        leaderboard = pooled_ranking(contents, min_visible=3)

        # Assert
        assert {e.participant.id for e in leaderboard.entries} == {"r0", "r1", "r2"}
        assert leaderboard.entries[0].participant.id == "r1"
        assert leaderboard.total_votes == 2
        assert leaderboard.feedback["r1"].strengths == ["Solid"]

    def test_no_votes_gives_uniform_scores(self) -> None:
        contents = StoreContents(participants=[participant("a"), participant("b")])
        leaderboard = pooled_ranking(contents, min_visible=0)
        assert [e.score for e in leaderboard.entries] == [UNIFORM_SCORE, UNIFORM_SCORE]
