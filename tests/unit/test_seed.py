"""Tests for seed import."""

import json

import pytest

from divtrack.db.seed import load_seed
from divtrack.services.sessions import SessionsService


@pytest.fixture
def seeded_repo(repo, fixtures_dir):
    load_seed(repo, fixtures_dir / "sample_seed.json")
    return repo


class TestLoadSeed:
    """Tests for load_seed."""

    def test_counts(self, repo, fixtures_dir):
        counts = load_seed(repo, fixtures_dir / "sample_seed.json")
        assert counts.leagues == 2
        assert counts.snapshots == 1
        assert counts.divination_cards == 1
        assert counts.card_rarities == 1
        assert counts.sessions == 3
        assert counts.session_cards == 4
        assert counts.summaries == 1

    def test_sessions_listed_newest_first(self, seeded_repo):
        page = SessionsService(seeded_repo).list_sessions("poe1", 1, 20)
        assert [s.session_id for s in page.sessions] == [
            "sess-active",
            "sess-summarized",
            "sess-priced",
        ]

    def test_priced_session_values(self, seeded_repo):
        page = SessionsService(seeded_repo).list_sessions("poe1", 1, 20)
        priced = next(s for s in page.sessions if s.session_id == "sess-priced")
        # Rain of Chaos is hidden from exchange and unpriced in stash
        assert priced.total_exchange_value == 10000.0
        assert priced.total_stash_value == 9600.0
        assert priced.duration_minutes == 90

    def test_summary_imported_with_missing_net_profit(self, seeded_repo):
        summary = seeded_repo.get_session_summary("sess-summarized")
        assert summary.total_exchange_value == 44.0
        assert summary.total_exchange_net_profit is None

    def test_detail_uses_catalog_and_rarity(self, seeded_repo):
        detail = SessionsService(seeded_repo).get_session_detail("sess-priced")
        doctor = next(c for c in detail.cards if c.name == "The Doctor")
        assert doctor.divination_card.rarity == 0
        assert doctor.divination_card.reward_html == '<span class="uniqueitem">Headhunter</span>'
        assert doctor.divination_card.flavour_html == "Time for medicine."

    def test_invalid_json_raises(self, repo, tmp_path):
        bad = tmp_path / "bad.json"
        bad.write_text("{not json", encoding="utf-8")
        with pytest.raises(json.JSONDecodeError):
            load_seed(repo, bad)

    def test_missing_required_field_raises(self, repo, tmp_path):
        seed = tmp_path / "seed.json"
        seed.write_text(json.dumps({"leagues": [{"id": "x", "game": "poe1"}]}), encoding="utf-8")
        with pytest.raises(KeyError):
            load_seed(repo, seed)

    def test_seeding_twice_keeps_one_copy(self, seeded_repo, fixtures_dir):
        counts = load_seed(seeded_repo, fixtures_dir / "sample_seed.json")
        assert counts.sessions == 3
        assert seeded_repo.count_sessions("poe1") == 3
        cards = seeded_repo.get_session_cards("sess-priced")
        assert sorted((c.card_name, c.count) for c in cards) == [
            ("Rain of Chaos", 30),
            ("The Doctor", 2),
        ]
        snapshot = seeded_repo.load_snapshot("snap-settlers-1")
        assert set(snapshot.exchange.card_prices) == {"The Doctor", "Rain of Chaos"}
        assert seeded_repo.get_session_summary("sess-summarized") is not None

    def test_malformed_session_writes_nothing(self, repo, tmp_path):
        seed = tmp_path / "seed.json"
        seed.write_text(
            json.dumps(
                {
                    "leagues": [{"id": "league-x", "game": "poe1", "name": "Standard"}],
                    "sessions": [{"id": "s1", "game": "poe1", "league_id": "league-x"}],
                }
            ),
            encoding="utf-8",
        )
        with pytest.raises(KeyError):
            load_seed(repo, seed)
        assert repo.get_league("league-x") is None
        assert repo.count_sessions("poe1") == 0
