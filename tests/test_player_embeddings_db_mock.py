"""Tests for the embedding store with mocked Supabase."""

from unittest.mock import MagicMock, patch

import pytest

from huddle.db.player_embeddings import (
    get_embedding_hashes,
    get_player_embedding,
    search_similar_players,
    sweep_absent_embeddings,
    upsert_player_embeddings,
)
from huddle.core.schemas_players import EmbeddingRecord


def _record(player_id="4046", **overrides):
    data = {
        "player_id": player_id,
        "content": "Player: Patrick Mahomes, Position: QB, Team: KC",
        "embedding": [0.1, 0.2],
        "content_hash": "a" * 64,
        "embed_priority": 10,
        "embed_reason": "fantasy_relevant",
        "player_name": "Patrick Mahomes",
        "position": "QB",
        "team": "KC",
    }
    data.update(overrides)
    return EmbeddingRecord(**data)


def test_get_player_embedding_found():
    with patch("huddle.db.player_embeddings.get_supabase") as mock_supabase:
        select = mock_supabase.return_value.table.return_value.select.return_value
        select.eq.return_value.execute.return_value = MagicMock(
            data=[_record().model_dump() | {"id": 7, "embedding_created": "2024-09-01T00:00:00Z"}]
        )

        record = get_player_embedding("4046")

        assert record is not None
        assert record.embed_reason == "fantasy_relevant"
        mock_supabase.return_value.table.assert_called_with("player_embeddings_selective")


def test_get_player_embedding_missing():
    with patch("huddle.db.player_embeddings.get_supabase") as mock_supabase:
        select = mock_supabase.return_value.table.return_value.select.return_value
        select.eq.return_value.execute.return_value = MagicMock(data=[])

        assert get_player_embedding("nobody") is None


def test_get_embedding_hashes_skips_rows_without_hash():
    with patch("huddle.db.player_embeddings.get_supabase") as mock_supabase:
        query = mock_supabase.return_value.table.return_value.select.return_value.in_
        query.return_value.execute.return_value = MagicMock(
            data=[
                {"player_id": "4046", "content_hash": "abc"},
                {"player_id": "4227", "content_hash": None},
            ]
        )

        assert get_embedding_hashes(["4046", "4227", "5892"]) == {"4046": "abc"}


def test_upsert_player_embeddings_resets_missed_runs():
    with patch("huddle.db.player_embeddings.get_supabase") as mock_supabase:
        table = mock_supabase.return_value.table.return_value

        count = upsert_player_embeddings([_record(missed_runs=2)])

        assert count == 1
        row = table.upsert.call_args.args[0][0]
        assert row["missed_runs"] == 0
        assert row["embedding_created"]
        assert table.upsert.call_args.kwargs == {"on_conflict": "player_id"}


def test_search_similar_players_calls_rpc():
    with patch("huddle.db.player_embeddings.get_supabase") as mock_supabase:
        mock_supabase.return_value.rpc.return_value.execute.return_value = MagicMock(
            data=[
                {"player_id": "4046", "content": "Player: Patrick Mahomes", "similarity": 0.81},
                {"player_id": "4227", "content": "Player: Harrison Butker", "similarity": 0.42},
            ]
        )

        matches = search_similar_players([0.1, 0.2], similarity_threshold=0.1, match_count=15)

        assert [m.player_id for m in matches] == ["4046", "4227"]
        mock_supabase.return_value.rpc.assert_called_once_with(
            "search_similar_players",
            {"query_embedding": [0.1, 0.2], "similarity_threshold": 0.1, "match_count": 15},
        )


def test_search_similar_players_empty():
    with patch("huddle.db.player_embeddings.get_supabase") as mock_supabase:
        mock_supabase.return_value.rpc.return_value.execute.return_value = MagicMock(data=None)

        assert search_similar_players([0.1], 0.1, 15) == []


def test_search_similar_players_reraises():
    with patch("huddle.db.player_embeddings.get_supabase") as mock_supabase:
        mock_supabase.return_value.rpc.return_value.execute.side_effect = RuntimeError("rpc")

        with pytest.raises(RuntimeError):
            search_similar_players([0.1], 0.1, 15)


def test_sweep_absent_embeddings_marks_purges_and_resets():
    with patch("huddle.db.player_embeddings.get_supabase") as mock_supabase:
        table = mock_supabase.return_value.table.return_value
        table.select.return_value.order.return_value.range.return_value.execute.return_value = (
            MagicMock(
                data=[
                    {"player_id": "present", "missed_runs": 1},
                    {"player_id": "new-miss", "missed_runs": 0},
                    {"player_id": "gone", "missed_runs": 2},
                ]
            )
        )

        marked, purged = sweep_absent_embeddings({"present"}, max_missed_runs=3)

        assert (marked, purged) == (1, 1)
        updates = [c.args[0] for c in table.update.call_args_list]
        assert {"missed_runs": 0} in updates
        assert {"missed_runs": 1} in updates
        table.delete.return_value.in_.assert_called_once_with("player_id", ["gone"])
