"""Tests for identity rendering and content hashing."""

from huddle.core.player_text import content_hash, render_identity_content, stable_attributes
from tests.fixtures_players import FREE_AGENT_WR, ROOKIE_WR, STARTING_QB, snapshot


class TestRenderIdentityContent:
    def test_full_identity(self):
        content = render_identity_content(snapshot(STARTING_QB))

        assert content == (
            "Player: Patrick Mahomes, Position: QB, Team: KC, College: Texas Tech, "
            'Experience: 7 years, Age: 29, Size: 74"/225lbs. '
            "Fantasy football QB for the KC team."
        )

    def test_rookie_marker_rendered(self):
        content = render_identity_content(snapshot(ROOKIE_WR))

        assert "Rookie Year: 2024" in content
        assert "Experience: 0 years" in content

    def test_missing_team_and_position_fallbacks(self):
        content = render_identity_content(snapshot(FREE_AGENT_WR, position=None))

        assert "Position: Unknown" in content
        assert "Team: FA" in content
        assert content.endswith("Fantasy football Unknown for the FA team.")

    def test_name_falls_back_to_first_and_last(self):
        player = snapshot(STARTING_QB, full_name=None)
        assert render_identity_content(player).startswith("Player: Patrick Mahomes,")

    def test_volatile_fields_not_rendered(self):
        player = snapshot(
            STARTING_QB,
            injury_status="Questionable",
            practice_participation="Limited",
            depth_chart_order=2,
        )
        content = render_identity_content(player)

        assert "Questionable" not in content
        assert "Limited" not in content


class TestContentHash:
    def test_stable_for_identical_identity(self):
        assert content_hash(snapshot(STARTING_QB)) == content_hash(snapshot(STARTING_QB))

    def test_hex_sha256(self):
        digest = content_hash(snapshot(STARTING_QB))
        assert len(digest) == 64
        int(digest, 16)

    def test_volatile_changes_keep_hash(self):
        baseline = content_hash(snapshot(STARTING_QB))
        changed = snapshot(
            STARTING_QB,
            status="Inactive",
            injury_status="Out",
            injury_notes="Ankle",
            practice_participation="DNP",
            depth_chart_order=3,
            news_updated=1728000000000,
        )
        assert content_hash(changed) == baseline

    def test_team_change_changes_hash(self):
        assert content_hash(snapshot(STARTING_QB, team="BUF")) != content_hash(snapshot(STARTING_QB))

    def test_age_change_changes_hash(self):
        assert content_hash(snapshot(STARTING_QB, age=30)) != content_hash(snapshot(STARTING_QB))

    def test_rookie_season_change_changes_hash(self):
        player = snapshot(ROOKIE_WR)
        assert content_hash(player, rookie_season="2024") != content_hash(
            player, rookie_season="2025"
        )

    def test_hash_covers_every_rendered_field(self):
        player = snapshot(STARTING_QB)
        content = render_identity_content(player)
        for value in stable_attributes(player):
            if value is not None:
                assert str(value) in content
