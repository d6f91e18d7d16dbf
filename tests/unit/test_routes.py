"""Tests for dashboard paths and the route-guard decision."""
import pytest

from purifier.lib.routes import (
    AREA_ROLES,
    AccessAction,
    AuthStatus,
    RouteDecision,
    UserRole,
    evaluate_route_access,
    get_dashboard_path,
)


@pytest.mark.unit
class TestDashboardPath:
    @pytest.mark.parametrize(
        "role,path",
        [
            (UserRole.ADMIN, "/admin/dashboard"),
            (UserRole.STAFF, "/staff/dashboard"),
            (UserRole.TECHNICIAN, "/technician/dashboard"),
        ],
    )
    def test_role_dashboards(self, role, path):
        assert get_dashboard_path(role) == path

    def test_unknown_role_goes_to_login(self):
        assert get_dashboard_path(None) == "/login"
        assert get_dashboard_path("CUSTOMER") == "/login"


@pytest.mark.unit
class TestEvaluateRouteAccess:
    admin_area = AREA_ROLES["admin"]

    def test_loading_waits(self):
        decision = evaluate_route_access(AuthStatus.LOADING, None, False, self.admin_area)
        assert decision == RouteDecision(AccessAction.WAIT)
        assert not decision.allowed

    def test_unauthenticated_redirects_to_login(self):
        decision = evaluate_route_access(AuthStatus.UNAUTHENTICATED, None, False, self.admin_area)
        assert decision == RouteDecision(AccessAction.REDIRECT, "/login")

    def test_authenticated_without_role_redirects_to_login(self):
        decision = evaluate_route_access(AuthStatus.AUTHENTICATED, None, True, self.admin_area)
        assert decision.location == "/login"

    def test_inactive_profile_redirects_with_flag(self):
        decision = evaluate_route_access(AuthStatus.AUTHENTICATED, UserRole.ADMIN, False, self.admin_area)
        assert decision == RouteDecision(AccessAction.REDIRECT, "/login?inactive=1")

    def test_wrong_role_redirects_to_own_dashboard(self):
        decision = evaluate_route_access(
            AuthStatus.AUTHENTICATED, UserRole.TECHNICIAN, True, self.admin_area
        )
        assert decision == RouteDecision(AccessAction.REDIRECT, "/technician/dashboard")

    def test_allowed_role_passes(self):
        decision = evaluate_route_access(AuthStatus.AUTHENTICATED, UserRole.ADMIN, True, self.admin_area)
        assert decision.allowed
        assert decision.location is None

    def test_multiple_allowed_roles(self):
        allowed = (UserRole.ADMIN, UserRole.STAFF)
        decision = evaluate_route_access(AuthStatus.AUTHENTICATED, UserRole.STAFF, True, allowed)
        assert decision.allowed
