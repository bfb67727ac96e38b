"""
Unit tests for rule condition matching.
"""

import re
from dataclasses import dataclass
from typing import List

import pytest

from service_acl.app.ability.conditions import matches, get_value, MISSING


@dataclass
class Document:
    id: str
    ownerId: str
    tags: List[str]
    status: str = "draft"


class TestConditions:
    """Test cases for the condition matcher."""

    @pytest.fixture
    def document(self):
        """Mapping subject with nested and list fields."""
        return {
            "id": "d1",
            "ownerId": "u1",
            "status": "review",
            "pages": 12,
            "tags": ["finance", "q3"],
            "meta": {"archived": False, "reviewers": [{"id": "u2"}, {"id": "u3"}]},
        }

    def test_plain_equality(self, document):
        """Test implicit $eq on a top-level field."""
        assert matches({"ownerId": "u1"}, document) is True
        assert matches({"ownerId": "u2"}, document) is False

    def test_all_fields_must_match(self, document):
        """Test that every field of a query must hold."""
        assert matches({"ownerId": "u1", "status": "review"}, document) is True
        assert matches({"ownerId": "u1", "status": "draft"}, document) is False

    def test_dotted_paths(self, document):
        """Test nested mapping and list traversal."""
        assert matches({"meta.archived": False}, document) is True
        assert matches({"meta.reviewers.id": "u3"}, document) is True
        assert matches({"meta.reviewers.0.id": "u2"}, document) is True
        assert get_value(document, "meta.missing.deep") is MISSING

    def test_list_field_matches_any_element(self, document):
        """Test that a scalar matches when contained in a list field."""
        assert matches({"tags": "q3"}, document) is True
        assert matches({"tags": "q4"}, document) is False

    def test_comparison_operators(self, document):
        """Test $gt/$gte/$lt/$lte."""
        assert matches({"pages": {"$gt": 10}}, document) is True
        assert matches({"pages": {"$gte": 12, "$lte": 12}}, document) is True
        assert matches({"pages": {"$lt": 12}}, document) is False
        assert matches({"status": {"$gt": 3}}, document) is False

    def test_membership_operators(self, document):
        """Test $in/$nin/$ne."""
        assert matches({"status": {"$in": ["draft", "review"]}}, document) is True
        assert matches({"status": {"$nin": ["draft", "review"]}}, document) is False
        assert matches({"ownerId": {"$ne": "u2"}}, document) is True

    def test_exists_and_missing_fields(self, document):
        """Test $exists and equality against null."""
        assert matches({"deletedAt": {"$exists": False}}, document) is True
        assert matches({"ownerId": {"$exists": True}}, document) is True
        assert matches({"deletedAt": None}, document) is True

    def test_regex(self, document):
        """Test $regex with options and compiled patterns."""
        assert matches({"status": {"$regex": "^REV", "$options": "i"}}, document) is True
        assert matches({"status": {"$regex": re.compile("view$")}}, document) is True
        assert matches({"pages": {"$regex": "1"}}, document) is False

    def test_array_operators(self, document):
        """Test $all, $size and $elemMatch."""
        assert matches({"tags": {"$all": ["q3", "finance"]}}, document) is True
        assert matches({"tags": {"$size": 3}}, document) is False
        assert matches({"meta.reviewers": {"$elemMatch": {"id": "u2"}}}, document) is True
        assert matches({"meta.reviewers": {"$elemMatch": {"id": "u9"}}}, document) is False

    def test_logical_operators(self, document):
        """Test $or/$and/$nor/$not."""
        assert matches({"$or": [{"ownerId": "u9"}, {"status": "review"}]}, document) is True
        assert matches({"$and": [{"ownerId": "u1"}, {"status": "draft"}]}, document) is False
        assert matches({"$nor": [{"ownerId": "u9"}]}, document) is True
        assert matches({"pages": {"$not": {"$gt": 20}}}, document) is True

    def test_attribute_subjects(self):
        """Test matching against object attributes."""
        doc = Document(id="d1", ownerId="u1", tags=["a"])
        assert matches({"ownerId": "u1", "tags": "a"}, doc) is True
        assert matches({"status": "published"}, doc) is False

    def test_callable_condition(self, document):
        """Test predicate conditions."""
        assert matches(lambda doc: doc["pages"] > 10, document) is True
        assert matches(lambda doc: doc["pages"] > 100, document) is False

    def test_unsupported_operator(self, document):
        """Test that unknown operators are rejected."""
        with pytest.raises(ValueError):
            matches({"pages": {"$near": 1}}, document)
        with pytest.raises(ValueError):
            matches({"$where": "true"}, document)
