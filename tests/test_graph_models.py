"""Tests for result holders, input literals and family decoding."""

from enum import Enum
from typing import Annotated, List, Optional

import pytest
from pydantic import Field, PlainValidator, ValidationError

from gql_sdkgen.core.graph_models import FamilyRegistry, GraphInput, GraphModel
from gql_sdkgen.core.ir import TypeKind


class Stars(str, Enum):
    ONE = "ONE"
    FIVE = "FIVE"


class LocationInput(GraphInput):
    __literal_kinds__ = {"city": TypeKind.STRING}

    city: str = Field(alias="city")


class ReviewInput(GraphInput):
    __literal_kinds__ = {
        "stars": TypeKind.INT,
        "rating": TypeKind.ENUM,
        "commentary": TypeKind.STRING,
        "tags": TypeKind.STRING,
        "location": TypeKind.INPUT_OBJECT,
        "public": TypeKind.BOOLEAN,
    }

    stars: int = Field(alias="stars")
    rating: Optional[Stars] = Field(default=None, alias="rating")
    commentary: Optional[str] = Field(default=None, alias="commentary")
    tags: Optional[List[str]] = Field(default=None, alias="tags")
    location: Optional[LocationInput] = Field(default=None, alias="location")
    public: Optional[bool] = Field(default=None, alias="isPublic")


class NodeFamily:
    __slots__ = ()


NODE_FAMILY = FamilyRegistry("Node", {
    "User": f"{__name__}:User",
    "Repo": f"{__name__}:Repo",
})

NodeMember = Annotated[NodeFamily, PlainValidator(NODE_FAMILY.decode)]


class User(NodeFamily, GraphModel):
    id: str = Field(default="", alias="id")
    login: Optional[str] = Field(default=None, alias="login")


class Repo(NodeFamily, GraphModel):
    id: str = Field(default="", alias="id")
    stars: int = Field(default=0, alias="stargazerCount")


class Holder(GraphModel):
    node: Optional[NodeMember] = Field(default=None, alias="node")
    nodes: Optional[List[Optional[NodeMember]]] = Field(default=None, alias="nodes")


class TestGraphInput:
    """Tests for input literal rendering."""

    def test_literal(self):
        review = ReviewInput(stars=5, commentary="Great")
        assert str(review) == '{ stars : 5 commentary : "Great" }'

    def test_enum_bare_and_alias_used(self):
        review = ReviewInput(stars=1, rating=Stars.FIVE, public=True)
        assert review.to_literal() == "{ stars : 1 rating : FIVE isPublic : true }"

    def test_nested_input_and_list(self):
        review = ReviewInput(stars=2, tags=["a", "b"], location=LocationInput(city="Oslo"))
        assert review.to_literal() == (
            '{ stars : 2 tags : [ "a" "b" ] location : { city : "Oslo" } }'
        )

    def test_required_field(self):
        with pytest.raises(ValidationError):
            ReviewInput(commentary="no stars")


class TestGraphModel:
    """Tests for result holder decoding."""

    def test_typename_alias(self):
        user = User.model_validate({"__typename": "User", "id": "1", "login": "ann"})
        assert user.typename == "User"
        assert user.login == "ann"

    def test_defaults_for_unselected_fields(self):
        repo = Repo.model_validate({"__typename": "Repo"})
        assert repo.id == ""
        assert repo.stars == 0

    def test_mutable(self):
        user = User(id="1")
        user.login = "bob"
        assert user.login == "bob"


class TestFamilyRegistry:
    """Tests for polymorphic decoding by __typename."""

    def test_decodes_concrete_member(self):
        holder = Holder.model_validate({"node": {"__typename": "User", "id": "1"}})
        assert type(holder.node) is User
        assert isinstance(holder.node, NodeFamily)

    def test_list_of_mixed_members(self):
        holder = Holder.model_validate({"nodes": [
            {"__typename": "Repo", "id": "r", "stargazerCount": 7},
            None,
            {"__typename": "User", "id": "u"},
        ]})
        assert type(holder.nodes[0]) is Repo
        assert holder.nodes[0].stars == 7
        assert holder.nodes[1] is None
        assert type(holder.nodes[2]) is User

    def test_unknown_typename_fails(self):
        with pytest.raises(ValidationError, match="not a member of the Node family"):
            Holder.model_validate({"node": {"__typename": "Team", "id": "t"}})

    def test_missing_typename_fails(self):
        with pytest.raises(ValidationError, match="Missing __typename"):
            Holder.model_validate({"node": {"id": "1"}})

    def test_resolve(self):
        assert NODE_FAMILY.resolve("Repo") is Repo
        assert NODE_FAMILY.typenames == ["Repo", "User"]
        with pytest.raises(LookupError):
            NODE_FAMILY.resolve("Team")
