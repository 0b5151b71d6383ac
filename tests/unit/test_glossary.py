"""
Tests for the glossary manager and guard.

These tests verify:
1. Glossary loading from packaged JSON files and dicts
2. Term finding and keyword hits
3. Guarding: every casing rewritten to the canonical form
4. Overlapping terms resolved longest-first
"""

import json

import pytest

from readerfirst.translation.glossary.manager import (
    GlossaryManager,
    GlossaryTerm,
    create_glossary,
    domain_keywords,
    protected_terms,
)


class TestGlossaryManager:
    """Test GlossaryManager class."""

    def test_initialization(self):
        manager = GlossaryManager()
        assert len(manager) == 0
        assert manager.domains_loaded == set()

    def test_add_term_defaults_target_to_source(self):
        manager = GlossaryManager()
        manager.add_term("LOD")

        assert "lod" in manager
        assert manager.get_translation("LOD") == "LOD"

    def test_add_empty_term_rejected(self):
        manager = GlossaryManager()
        with pytest.raises(ValueError):
            manager.add_term("   ")

    def test_case_insensitive_lookup(self):
        manager = GlossaryManager()
        manager.add_term("Normal Map", "normal map")

        assert "NORMAL MAP" in manager
        assert manager.get_term("normal map").target == "normal map"

    def test_load_from_dict(self):
        manager = GlossaryManager()
        count = manager.load_from_dict({"rig": "rig", "PBR": "PBR"}, domain="test")

        assert count == 2
        assert "test" in manager.domains_loaded

    def test_load_from_file(self, tmp_path):
        path = tmp_path / "studio.json"
        path.write_text(json.dumps({"domain": "studio", "terms": {"LOD": "LOD"}}), encoding="utf-8")

        manager = GlossaryManager()
        assert manager.load_from_file(path) == 1
        assert "studio" in manager.domains_loaded

    def test_load_missing_domain(self):
        manager = GlossaryManager()
        assert manager.load_domain("nonexistent") == 0
        assert len(manager) == 0

    def test_packaged_domains(self):
        protected = protected_terms()
        keywords = domain_keywords()

        assert len(protected) == 8
        assert "edge loop" in protected
        assert "albedo" in keywords
        assert "albedo" not in protected

    def test_create_glossary_with_custom_terms(self):
        manager = create_glossary(["protected"], custom_terms={"LOD": "LOD"})
        assert "lod" in manager
        assert "custom" in manager.domains_loaded


class TestTermFinding:

    def test_find_terms_in_text(self):
        found = protected_terms().find_terms_in_text("Bake the Normal Map after fixing topology.")
        sources = {term.source for term in found}
        assert sources == {"topology", "normal map"}

    def test_keyword_hits_follow_declaration_order(self):
        hits = domain_keywords().keyword_hits("Albedo and roughness feed PBR shading.")
        assert hits == ["PBR", "albedo", "roughness"]

    def test_term_matches(self):
        term = GlossaryTerm(source="UV", target="UV")
        assert term.matches("unwrap the uv shell")
        assert not term.matches("unwrap the shell")


class TestGuard:
    """Guarded text carries every term in its canonical form."""

    def test_canonical_form_at_every_occurrence(self):
        guarded = protected_terms().guard_text("TOPOLOGY first, then Topology, then an EDGE LOOP.")
        assert guarded == "topology first, then topology, then an edge loop."

    def test_uppercase_canonical_form(self):
        guarded = protected_terms().guard_text("Lay out the uv islands and check pbr.")
        assert guarded == "Lay out the UV islands and check PBR."

    def test_other_characters_unchanged(self):
        text = "Nothing to protect here: 42 <b>bold</b>."
        assert protected_terms().guard_text(text) == text

    def test_longer_term_wins_overlap(self):
        manager = GlossaryManager()
        manager.load_from_dict({"Map": "Map", "Normal Map": "Normal-Map"})

        assert manager.guard_text("a normal map") == "a Normal-Map"

    def test_retopology_not_split_by_topology(self):
        guarded = protected_terms().guard_text("RETOPOLOGY fixes bad Topology.")
        assert guarded == "retopology fixes bad topology."

    def test_replacement_output_not_rematched(self):
        manager = GlossaryManager()
        manager.load_from_dict({"ab": "b", "b": "B"})

        # "ab" becomes "b" but must not then be rewritten to "B"
        assert manager.guard_text("ab b") == "b B"

    def test_text_containing_private_use_chars(self):
        manager = GlossaryManager()
        manager.add_term("UV")
        text = "\ue000uv\ue001"

        assert manager.guard_text(text) == "\ue000UV\ue001"

    def test_empty_inputs(self):
        assert protected_terms().guard_text("") == ""
        assert GlossaryManager().guard_text("uv") == "uv"
