from flask import Blueprint

from storefront.routes.utils import get_container, get_current_user, success_response
from storefront.services.membership_service import MembershipService

membership_bp = Blueprint("membership", __name__)


@membership_bp.route("/me", methods=["GET"])
def get_my_membership():
    """Membership benefits currently in effect for the signed-in shopper."""
    return success_response(get_container().get(MembershipService).describe(get_current_user()))
