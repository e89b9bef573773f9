from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from adapters.google.client import AdsIdentity, get_google_ads_client
from adapters.pipedream.connect_proxy import ConnectProxy, get_connect_proxy
from core.models.campaign import CampaignCreationResponse, SimpleCampaignResponse
from core.services.campaign_creation_service import get_campaign_creation_service
from core.services.simple_campaign_service import get_simple_campaign_service
from exceptions.custom_exceptions import BusinessValidationException, UpstreamRequestException
from main import app

CUSTOMER_ID = "6388991727"
IDENTITY_PARAMS = {"externalUserId": "test-user-1", "accountId": "apn_GXhxB59"}


@pytest.fixture
def creation_service():
    return AsyncMock()


@pytest.fixture
def simple_campaign_service():
    return AsyncMock()


@pytest.fixture
def connect_proxy():
    return AsyncMock(spec=ConnectProxy)


@pytest.fixture
def client(ads_client, creation_service, simple_campaign_service, connect_proxy):
    app.dependency_overrides[get_google_ads_client] = lambda: ads_client
    app.dependency_overrides[get_campaign_creation_service] = lambda: creation_service
    app.dependency_overrides[get_simple_campaign_service] = lambda: simple_campaign_service
    app.dependency_overrides[get_connect_proxy] = lambda: connect_proxy
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"


class TestCreateCompleteCampaign:
    def test_returns_service_response(self, client, creation_service):
        creation_service.create_complete_campaign.return_value = CampaignCreationResponse(
            success=True,
            batchJob=f"customers/{CUSTOMER_ID}/batchJobs/1",
            status="DONE",
            confirmed=True,
            operationCount=2,
        )

        response = client.post(
            f"/api/customers/{CUSTOMER_ID}/createCompleteCampaign",
            json={**IDENTITY_PARAMS, "campaignName": "Spring Sale"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["status"] == "DONE"
        assert body["confirmed"] is True
        customer_id, request = creation_service.create_complete_campaign.await_args.args
        assert customer_id == CUSTOMER_ID
        assert request.campaignName == "Spring Sale"

    def test_validation_error_envelope(self, client, creation_service):
        creation_service.create_complete_campaign.side_effect = BusinessValidationException(
            "campaignName is required", details={"missing": ["campaignName"]}
        )

        response = client.post(
            f"/api/customers/{CUSTOMER_ID}/createCompleteCampaign", json=IDENTITY_PARAMS
        )

        assert response.status_code == 422
        assert response.json() == {
            "success": False,
            "data": None,
            "error": "campaignName is required",
            "details": {"missing": ["campaignName"]},
        }

    def test_malformed_body_rejected(self, client, creation_service):
        response = client.post(
            f"/api/customers/{CUSTOMER_ID}/createCompleteCampaign",
            json={**IDENTITY_PARAMS, "campaignName": "X", "maxCpcUsd": -1},
        )

        assert response.status_code == 422
        assert response.json()["error"] == "Invalid or missing request fields"
        creation_service.create_complete_campaign.assert_not_awaited()

    def test_upstream_failure_is_bad_gateway(self, client, creation_service):
        creation_service.create_complete_campaign.side_effect = UpstreamRequestException(
            "Request contains an invalid argument.", upstream_status=400
        )

        response = client.post(
            f"/api/customers/{CUSTOMER_ID}/createCompleteCampaign",
            json={**IDENTITY_PARAMS, "campaignName": "X"},
        )

        assert response.status_code == 502
        assert response.json()["error"] == "Request contains an invalid argument."


class TestSearch:
    def test_search_passes_query_through(self, client, ads_client):
        ads_client.search.return_value = [{"campaign": {"id": "1"}}]
        query = "SELECT campaign.id FROM campaign"

        response = client.post(
            f"/api/customers/{CUSTOMER_ID}/googleAds:search",
            params={**IDENTITY_PARAMS, "loginCustomerId": "1112223333"},
            json={"query": query},
        )

        assert response.status_code == 200
        assert response.json() == {"results": [{"campaign": {"id": "1"}}]}
        ads_client.search.assert_awaited_once_with(
            CUSTOMER_ID,
            query,
            AdsIdentity("test-user-1", "apn_GXhxB59", login_customer_id="1112223333"),
        )

    def test_search_requires_identity(self, client, ads_client):
        response = client.post(
            f"/api/customers/{CUSTOMER_ID}/googleAds:search", json={"query": "SELECT"}
        )

        assert response.status_code == 422
        ads_client.search.assert_not_awaited()

    def test_search_requires_query(self, client, ads_client):
        response = client.post(
            f"/api/customers/{CUSTOMER_ID}/googleAds:search", params=IDENTITY_PARAMS, json={}
        )

        assert response.status_code == 422
        assert response.json()["error"] == "query is required in request body"


class TestMutate:
    def test_mutate_forwards_operations(self, client, ads_client):
        ads_client.mutate.return_value = {"results": [{"resourceName": "customers/1/campaigns/2"}]}
        operations = [{"update": {"resourceName": "customers/1/campaigns/2", "status": "PAUSED"}}]

        response = client.post(
            f"/api/customers/{CUSTOMER_ID}/campaigns/mutate",
            json={**IDENTITY_PARAMS, "operations": operations},
        )

        assert response.status_code == 200
        ads_client.mutate.assert_awaited_once_with(
            CUSTOMER_ID, "campaigns", operations, AdsIdentity("test-user-1", "apn_GXhxB59")
        )

    def test_mutate_requires_operations(self, client, ads_client):
        response = client.post(
            f"/api/customers/{CUSTOMER_ID}/campaigns/mutate", json=IDENTITY_PARAMS
        )

        assert response.status_code == 422
        ads_client.mutate.assert_not_awaited()


class TestListCustomers:
    def test_lists_accessible_customers(self, client, ads_client):
        ads_client.list_accessible_customers.return_value = {
            "resourceNames": [f"customers/{CUSTOMER_ID}"]
        }

        response = client.get("/api/customers", params=IDENTITY_PARAMS)

        assert response.status_code == 200
        assert response.json() == {"resourceNames": [f"customers/{CUSTOMER_ID}"]}


class TestGetCustomer:
    def test_reads_customer(self, client, ads_client):
        ads_client.get_customer.return_value = {"resourceName": f"customers/{CUSTOMER_ID}"}

        response = client.get(
            f"/api/customers/{CUSTOMER_ID}",
            params={**IDENTITY_PARAMS, "loginCustomerId": "1112223333"},
        )

        assert response.status_code == 200
        assert response.json() == {"resourceName": f"customers/{CUSTOMER_ID}"}
        ads_client.get_customer.assert_awaited_once_with(
            CUSTOMER_ID, AdsIdentity("test-user-1", "apn_GXhxB59", "1112223333")
        )

    def test_requires_identity(self, client, ads_client):
        response = client.get(f"/api/customers/{CUSTOMER_ID}")

        assert response.status_code == 422
        ads_client.get_customer.assert_not_awaited()


class TestKeywordIdeas:
    def test_defaults_applied(self, client, ads_client):
        ads_client.generate_keyword_ideas.return_value = {"results": []}

        response = client.post(
            f"/api/customers/{CUSTOMER_ID}/generateKeywordIdeas",
            json={**IDENTITY_PARAMS, "keywords": ["running shoes"]},
        )

        assert response.status_code == 200
        ads_client.generate_keyword_ideas.assert_awaited_once_with(
            CUSTOMER_ID,
            AdsIdentity("test-user-1", "apn_GXhxB59"),
            keywords=["running shoes"],
            url=None,
            language="languageConstants/1000",
            geo_target_constants=["geoTargetConstants/2376"],
        )

    def test_requires_keyword_or_url(self, client, ads_client):
        response = client.post(
            f"/api/customers/{CUSTOMER_ID}/generateKeywordIdeas", json=IDENTITY_PARAMS
        )

        assert response.status_code == 422
        assert response.json()["error"] == "At least one keyword or url is required"
        ads_client.generate_keyword_ideas.assert_not_awaited()


class TestCreateSimpleCampaign:
    def test_returns_both_mutate_responses(self, client, simple_campaign_service):
        simple_campaign_service.create_simple_campaign.return_value = SimpleCampaignResponse(
            success=True,
            budget={"results": [{"resourceName": f"customers/{CUSTOMER_ID}/campaignBudgets/1"}]},
            campaign={"results": [{"resourceName": f"customers/{CUSTOMER_ID}/campaigns/2"}]},
        )

        response = client.post(
            f"/api/customers/{CUSTOMER_ID}/createSimpleCampaign",
            json={**IDENTITY_PARAMS, "campaignName": "Spring Sale"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["campaign"]["results"][0]["resourceName"].endswith("/campaigns/2")
        customer_id, request = simple_campaign_service.create_simple_campaign.await_args.args
        assert customer_id == CUSTOMER_ID
        assert request.status == "PAUSED"

    def test_invalid_status_rejected(self, client, simple_campaign_service):
        response = client.post(
            f"/api/customers/{CUSTOMER_ID}/createSimpleCampaign",
            json={**IDENTITY_PARAMS, "campaignName": "X", "status": "REMOVED"},
        )

        assert response.status_code == 422
        simple_campaign_service.create_simple_campaign.assert_not_awaited()


class TestListings:
    def test_campaigns_default_login_customer(self, client, ads_client):
        ads_client.list_campaigns.return_value = [{"campaign": {"id": "1"}}]

        response = client.get(
            "/api/campaigns", params={**IDENTITY_PARAMS, "customerId": CUSTOMER_ID}
        )

        assert response.status_code == 200
        assert response.json() == {"results": [{"campaign": {"id": "1"}}]}
        ads_client.list_campaigns.assert_awaited_once_with(
            CUSTOMER_ID, AdsIdentity("test-user-1", "apn_GXhxB59", CUSTOMER_ID)
        )

    def test_campaigns_require_customer(self, client, ads_client):
        response = client.get("/api/campaigns", params=IDENTITY_PARAMS)

        assert response.status_code == 422
        assert response.json()["error"] == (
            "externalUserId, accountId, and customerId are required"
        )
        ads_client.list_campaigns.assert_not_awaited()

    def test_ad_groups_filtered_by_campaign(self, client, ads_client):
        ads_client.list_ad_groups.return_value = []

        response = client.get(
            "/api/ad-groups",
            params={
                **IDENTITY_PARAMS,
                "customerId": CUSTOMER_ID,
                "campaignId": "111",
                "loginCustomerId": "1112223333",
            },
        )

        assert response.status_code == 200
        ads_client.list_ad_groups.assert_awaited_once_with(
            CUSTOMER_ID,
            AdsIdentity("test-user-1", "apn_GXhxB59", "1112223333"),
            campaign_id=111,
        )

    @pytest.mark.parametrize("campaign_id", ["1 OR 1=1", "abc", "-5"])
    def test_non_numeric_campaign_id_rejected(self, client, ads_client, campaign_id):
        response = client.get(
            "/api/ad-groups",
            params={**IDENTITY_PARAMS, "customerId": CUSTOMER_ID, "campaignId": campaign_id},
        )

        assert response.status_code == 422
        assert response.json()["error"] == "campaignId must be numeric"
        ads_client.list_ad_groups.assert_not_awaited()

    def test_ads_without_filter(self, client, ads_client):
        ads_client.list_ads.return_value = [{"adGroupAd": {"status": "ENABLED"}}]

        response = client.get("/api/ads", params={**IDENTITY_PARAMS, "customerId": CUSTOMER_ID})

        assert response.status_code == 200
        assert response.json() == {"results": [{"adGroupAd": {"status": "ENABLED"}}]}
        assert ads_client.list_ads.await_args.kwargs == {"ad_group_id": None}


class TestAccountDetails:
    def test_returns_connect_account(self, client, connect_proxy):
        connect_proxy.get_account.return_value = {"id": "apn_GXhxB59", "name": "Ads"}

        response = client.get(
            "/api/account-details/apn_GXhxB59", params={"externalUserId": "test-user-1"}
        )

        assert response.status_code == 200
        assert response.json() == {"id": "apn_GXhxB59", "name": "Ads"}
        connect_proxy.get_account.assert_awaited_once_with("apn_GXhxB59")

    def test_requires_external_user(self, client, connect_proxy):
        response = client.get("/api/account-details/apn_GXhxB59")

        assert response.status_code == 422
        connect_proxy.get_account.assert_not_awaited()

    def test_lookup_failure_is_bad_gateway(self, client, connect_proxy):
        connect_proxy.get_account.side_effect = UpstreamRequestException(
            "account not found", upstream_status=404
        )

        response = client.get(
            "/api/account-details/apn_missing", params={"externalUserId": "test-user-1"}
        )

        assert response.status_code == 502
        assert response.json()["error"] == "account not found"


class TestRequestId:
    def test_incoming_request_id_echoed(self, client, ads_client):
        ads_client.list_accessible_customers.return_value = {"resourceNames": []}

        response = client.get(
            "/api/customers", params=IDENTITY_PARAMS, headers={"x-request-id": "abc123"}
        )
        assert response.headers["x-request-id"] == "abc123"

    def test_request_id_generated(self, client, ads_client):
        ads_client.list_accessible_customers.return_value = {"resourceNames": []}

        response = client.get("/api/customers", params=IDENTITY_PARAMS)
        assert len(response.headers["x-request-id"]) == 8
