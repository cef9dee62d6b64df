"""Tests for regulium/services/abbreviations.py - abbreviation glossary."""

import json

from regulium.services.abbreviations import AbbreviationGlossary


class TestLoad:
    def test_loads_flat_object(self, tmp_path):
        """A flat JSON object of term to expansion is loaded."""
        path = tmp_path / "abbreviations.json"
        path.write_text(json.dumps({"ASL": "Age-sensitive logic", "GH": "Geo-handler"}), encoding="utf-8")
        glossary = AbbreviationGlossary(path)
        glossary.load()
        assert len(glossary) == 2

    def test_missing_file_gives_empty_glossary(self, tmp_path, caplog):
        """A missing file leaves the glossary empty."""
        glossary = AbbreviationGlossary(tmp_path / "missing.json")
        glossary.load()
        assert len(glossary) == 0
        assert "not found" in caplog.text

    def test_invalid_json_gives_empty_glossary(self, tmp_path):
        """Unparseable JSON leaves the glossary empty."""
        path = tmp_path / "abbreviations.json"
        path.write_text("[1, 2", encoding="utf-8")
        glossary = AbbreviationGlossary(path, terms={"OLD": "stale"})
        glossary.load()
        assert len(glossary) == 0

    def test_non_object_is_ignored(self, tmp_path):
        """A JSON array is not a glossary."""
        path = tmp_path / "abbreviations.json"
        path.write_text('["ASL"]', encoding="utf-8")
        glossary = AbbreviationGlossary(path)
        glossary.load()
        assert len(glossary) == 0


class TestRelevantTerms:
    GLOSSARY = AbbreviationGlossary(terms={"ASL": "Age-sensitive logic", "GH": "Geo-handler", "T5": "Tier 5 data"})

    def test_whole_word_matches_in_glossary_order(self):
        """Matched terms come back in glossary order."""
        assert self.GLOSSARY.relevant_terms("Uses GH routing and ASL.") == {
            "ASL": "Age-sensitive logic",
            "GH": "Geo-handler",
        }

    def test_case_sensitive(self):
        """Lower-case text does not match upper-case terms."""
        assert self.GLOSSARY.relevant_terms("asl and gh") == {}

    def test_no_partial_word_matches(self):
        """Terms inside longer words are not matched."""
        assert self.GLOSSARY.relevant_terms("GHOST and BASL") == {}

    def test_empty_text(self):
        """Empty text matches nothing."""
        assert self.GLOSSARY.relevant_terms("") == {}
