"""Tests for the player snapshot store with mocked Supabase."""

from unittest.mock import MagicMock, patch

import pytest

from huddle.db.players import (
    ID_LOOKUP_CHUNK,
    get_players_by_ids,
    list_player_stat_rows,
    upsert_players,
)
from tests.fixtures_players import STARTING_K, STARTING_QB, snapshot


def test_upsert_players_writes_rows_with_sync_time():
    with patch("huddle.db.players.get_supabase") as mock_supabase:
        table = mock_supabase.return_value.table.return_value

        count = upsert_players([snapshot(STARTING_QB), snapshot(STARTING_K)])

        assert count == 2
        mock_supabase.return_value.table.assert_called_with("players_raw")
        rows = table.upsert.call_args.args[0]
        assert table.upsert.call_args.kwargs == {"on_conflict": "player_id"}
        assert [r["player_id"] for r in rows] == ["4046", "4227"]
        assert all(r["last_synced"] for r in rows)
        assert rows[0]["rookie_year"] == "2017"


def test_upsert_players_empty_skips_database():
    with patch("huddle.db.players.get_supabase") as mock_supabase:
        assert upsert_players([]) == 0
        mock_supabase.assert_not_called()


def test_upsert_players_reraises():
    with patch("huddle.db.players.get_supabase") as mock_supabase:
        mock_supabase.return_value.table.return_value.upsert.return_value.execute.side_effect = (
            RuntimeError("connection reset")
        )

        with pytest.raises(RuntimeError, match="connection reset"):
            upsert_players([snapshot(STARTING_QB)])


def test_get_players_by_ids_returns_only_found():
    with patch("huddle.db.players.get_supabase") as mock_supabase:
        query = mock_supabase.return_value.table.return_value.select.return_value.in_
        query.return_value.execute.return_value = MagicMock(
            data=[{"player_id": "4046", "full_name": "Patrick Mahomes", "injury_status": "Out"}]
        )

        found = get_players_by_ids(["4046", "missing", "4046"])

        assert list(found) == ["4046"]
        assert found["4046"].injury_status == "Out"
        query.assert_called_once_with("player_id", ["4046", "missing"])


def test_get_players_by_ids_chunks_long_lists():
    with patch("huddle.db.players.get_supabase") as mock_supabase:
        query = mock_supabase.return_value.table.return_value.select.return_value.in_
        query.return_value.execute.return_value = MagicMock(data=[])

        get_players_by_ids([str(n) for n in range(ID_LOOKUP_CHUNK + 1)])

        assert query.call_count == 2


def test_get_players_by_ids_empty():
    with patch("huddle.db.players.get_supabase") as mock_supabase:
        assert get_players_by_ids([]) == {}
        mock_supabase.assert_not_called()


def test_list_player_stat_rows_pages_until_short_page():
    with patch("huddle.db.players.PAGE_SIZE", 2), patch(
        "huddle.db.players.get_supabase"
    ) as mock_supabase:
        ranged = mock_supabase.return_value.table.return_value.select.return_value.range
        ranged.return_value.execute.side_effect = [
            MagicMock(data=[{"position": "QB"}, {"position": "RB"}]),
            MagicMock(data=[{"position": "K"}]),
        ]

        rows = list_player_stat_rows()

        assert [r["position"] for r in rows] == ["QB", "RB", "K"]
        assert [c.args for c in ranged.call_args_list] == [(0, 1), (2, 3)]
