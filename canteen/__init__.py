import logging
from datetime import timedelta
from typing import Optional
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from canteen.configuration.settings import Configuration
from canteen.core.exceptions.handlers import register_exception_handlers
from canteen.database.connection import init_db, init_engine
from canteen.auth.credentials import CredentialCodec
from canteen.auth.gate import AuthorizationGate
from canteen.integration.razorpay import build_gateway

from canteen.auth.auth import AuthRouter
from canteen.admin.coupons import AdminCouponRouter
from canteen.admin.dashboard import AdminDashboardRouter
from canteen.admin.users import AdminUserRouter

from canteen.routes.product.product import ProductRouter
from canteen.routes.canteen.product import CanteenProductRouter
from canteen.routes.canteen.order import CanteenOrderRouter
from canteen.routes.canteen.stats import CanteenStatsRouter
from canteen.routes.user.cart import CartRouter
from canteen.routes.user.order import OrderRouter
from canteen.routes.user.wallet import WalletRouter
from canteen.routes.user.coupon import CouponRedeemRouter
from canteen.routes.user.notification import NotificationRouter
from canteen.routes.user.profile import ProfileRouter


def create_app(configuration: Optional[Configuration] = None) -> FastAPI:
    """
    Creates and configures the FastAPI application, including middlewares and routes.
    """
    configuration = configuration or Configuration()
    logging.info(f"SYSTEM >>> Environment loaded: {configuration.environment}")

    app = FastAPI(title="Canteen API")
    app.state.configuration = configuration

    codec = CredentialCodec(
        configuration.signing_secret,
        algorithm=configuration.jwt_algorithm,
        token_lifetime=timedelta(days=configuration.jwt_expiration_days),
        bcrypt_rounds=configuration.bcrypt_rounds,
    )
    app.state.gate = AuthorizationGate(codec, forbidden_status_code=configuration.forbidden_status_code)
    app.state.payment_gateway = build_gateway(configuration)

    init_engine(configuration)
    if configuration.init_database:
        logging.info("SYSTEM >>> Initializing the database...")
        init_db(configuration)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=configuration.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app, expose_errors=configuration.expose_errors)

    app.include_router(AuthRouter())
    app.include_router(AdminUserRouter())
    app.include_router(AdminCouponRouter(configuration))
    app.include_router(AdminDashboardRouter())

    app.include_router(ProductRouter())
    app.include_router(CanteenProductRouter())
    app.include_router(CanteenOrderRouter(configuration))
    app.include_router(CanteenStatsRouter())
    app.include_router(CartRouter())
    app.include_router(OrderRouter())
    app.include_router(WalletRouter(configuration))
    app.include_router(CouponRedeemRouter(configuration))
    app.include_router(NotificationRouter())
    app.include_router(ProfileRouter())

    return app
