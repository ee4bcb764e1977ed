"""
Tests for RouteContext discovery and the contract registry.
"""

import logging

import pytest
from flask import Response

from typed_routes import (
    CannedResponse,
    ContractConfigurationError,
    EmptyRequestBody,
    Header,
    IntegerQueryParam,
    JSONRouteContext,
    NestedQueryParam,
    QueryParam,
    ResponseContext,
    ResponseTuple,
    RouteContext,
    StringQueryParam,
    get_contract,
    list_contracts,
)
from sample_app import CreateUserContext, SearchContext, ShowContext, User


class TestDiscovery:

    def test_query_params_in_declaration_order(self):
        assert ShowContext.request_query_params() == (ShowContext.fail_hard, ShowContext.echo)

    def test_headers(self):
        assert SearchContext.request_headers() == (SearchContext.api_version,)
        assert ShowContext.request_headers() == ()

    def test_nested_params_are_query_params(self):
        assert SearchContext.status in SearchContext.request_query_params()

    def test_response_variants(self):
        assert ShowContext.response_variants() == (ShowContext.success, ShowContext.bad_request)

    def test_empty_contract(self):
        class EmptyContext(RouteContext):
            pass

        assert EmptyContext.request_query_params() == ()
        assert EmptyContext.request_headers() == ()
        assert EmptyContext.response_variants() == ()
        assert EmptyContext.response_body_tuples() == ()
        assert EmptyContext.request_body_type is EmptyRequestBody

    def test_declares_by_identity(self):
        assert ShowContext.declares(ShowContext.echo)
        assert not ShowContext.declares(IntegerQueryParam("echo"))
        assert not ShowContext.declares(SearchContext.page)

    def test_inherited_fields(self):
        class ChildContext(ShowContext):
            extra = StringQueryParam("extra")

        assert ChildContext.request_query_params() == (
            ShowContext.fail_hard,
            ShowContext.echo,
            ChildContext.extra,
        )
        assert ChildContext.declares(ShowContext.success)

    def test_redeclared_attribute_replaces_inherited(self):
        class ChildContext(ShowContext):
            echo = StringQueryParam("echo")

        assert ChildContext.request_query_params() == (ShowContext.fail_hard, ChildContext.echo)
        assert not ChildContext.declares(ShowContext.echo)

    def test_non_descriptor_attributes_ignored(self):
        class HelperContext(RouteContext):
            limit = 10
            term = StringQueryParam("term")

        assert HelperContext.fields() == {"term": HelperContext.term}


class TestResponseBodyTuples:

    def test_show_context(self):
        assert ShowContext.response_body_tuples() == (
            ResponseTuple(200, "text/plain", str),
            ResponseTuple(400, "text/plain", str),
        )

    def test_idempotent(self):
        first = CreateUserContext.response_body_tuples()
        assert CreateUserContext.response_body_tuples() is first

    def test_body_types_and_missing_content_type(self):
        tuples = CreateUserContext.response_body_tuples()
        assert tuples[0] == ResponseTuple(201, "application/json", User)
        assert tuples[2].status_code == 204
        assert tuples[2].content_type is None

    def test_canned_response_not_mutated(self):
        ShowContext.response_body_tuples()
        assert ShowContext.bad_request.response.status_code == 400

    def test_custom_configure(self):
        def configure(response):
            response.status_code = 418
            response.headers["Content-Type"] = "application/problem+json"

        class TeapotContext(RouteContext):
            teapot = ResponseContext(configure, body_type=dict)

        assert TeapotContext.response_body_tuples() == (
            ResponseTuple(418, "application/problem+json", dict),
        )


class TestDefinitionTimeChecks:

    def test_duplicate_query_key_raises(self):
        with pytest.raises(ContractConfigurationError) as exc:
            class DuplicateContext(RouteContext):
                first = QueryParam("a")
                second = IntegerQueryParam("a")

        assert "'first'" in str(exc.value)
        assert "'second'" in str(exc.value)

    def test_nested_key_collides_with_plain_key(self):
        with pytest.raises(ContractConfigurationError):
            class CollidingContext(RouteContext):
                plain = QueryParam("filter[status]")
                nested = NestedQueryParam.at("filter", "status")

    def test_duplicate_header_is_case_insensitive(self):
        with pytest.raises(ContractConfigurationError):
            class DuplicateHeaderContext(RouteContext):
                first = Header("X-Trace")
                second = Header("x-trace")

    def test_same_name_as_query_and_header_allowed(self):
        class MixedContext(RouteContext):
            query_version = QueryParam("version")
            header_version = Header("version")

        assert len(MixedContext.fields()) == 2


class TestRegistry:

    def test_concrete_contracts_registered(self):
        assert get_contract("ShowContext") is ShowContext
        assert "SearchContext" in list_contracts()

    def test_abstract_base_not_registered(self):
        assert get_contract("JSONRouteContext") is None
        assert get_contract("RouteContext") is None

    def test_custom_name(self):
        class NamedContext(RouteContext):
            name = "orders.list"

        assert get_contract("orders.list") is NamedContext

    def test_name_taken_by_another_class_warns(self, caplog):
        with caplog.at_level(logging.WARNING, logger="typed_routes.contracts"):
            class FirstOwner(RouteContext):
                name = "shared.contract"

            class SecondOwner(RouteContext):
                name = "shared.contract"

        assert get_contract("shared.contract") is SecondOwner
        warnings = [r for r in caplog.records if getattr(r, "event", None) == "contract_name_collision"]
        assert len(warnings) == 1
        assert warnings[0].levelno == logging.WARNING
        assert warnings[0].previous.endswith("FirstOwner")

    def test_redefined_class_does_not_warn(self, caplog):
        def define():
            class ReloadedContext(RouteContext):
                name = "reloaded.contract"
            return ReloadedContext

        with caplog.at_level(logging.WARNING, logger="typed_routes.contracts"):
            define()
            second = define()

        assert get_contract("reloaded.contract") is second
        assert not [r for r in caplog.records if getattr(r, "event", None) == "contract_name_collision"]

    def test_missing_contract(self):
        assert get_contract("does-not-exist") is None

    def test_json_route_context(self):
        assert JSONRouteContext.default_content_type == "application/json"
        assert CreateUserContext.default_content_type == "application/json"
        assert CreateUserContext.request_body_type is User

    def test_canned_response_declaration(self):
        canned = CannedResponse(Response("gone", status=410))
        assert canned.body_type is str
