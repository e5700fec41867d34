import logging

from django.contrib.auth import get_user_model
from django.db import IntegrityError
from django.db import transaction
from django.utils.translation import gettext_lazy as _
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema
from drf_spectacular.utils import extend_schema_view
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.exceptions import NotFound
from rest_framework.exceptions import ValidationError
from rest_framework.mixins import ListModelMixin
from rest_framework.mixins import RetrieveModelMixin
from rest_framework.permissions import AllowAny
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from travelxguide.guides.models import GuideApplication
from travelxguide.guides.services import ApplicationError
from travelxguide.guides.services import review_application
from travelxguide.guides.services import submit_application
from travelxguide.users.api.permissions import IsPlatformAdmin
from travelxguide.users.services import generate_username
from travelxguide.users.services import mark_verified

from .filters import ApprovedGuideFilter
from .filters import GuideApplicationFilter
from .serializers import GuideApplicationAdminSerializer
from .serializers import GuideApplicationSerializer
from .serializers import PublicGuideSerializer
from .serializers import ReviewSerializer

logger = logging.getLogger(__name__)


@extend_schema_view(
    list=extend_schema(tags=["Guides"]),
    apply=extend_schema(tags=["Guides"]),
    me=extend_schema(tags=["Guides"]),
)
class GuideViewSet(ListModelMixin, GenericViewSet):
    """Public guide directory plus the apply / my-application endpoints."""

    serializer_class = PublicGuideSerializer
    filter_backends = [DjangoFilterBackend]
    filterset_class = ApprovedGuideFilter
    permission_classes = [AllowAny]

    def get_queryset(self):
        return GuideApplication.objects.approved().order_by(
            "-rating", "-tours_completed", "-created_at"
        )

    @action(
        detail=False,
        methods=["post"],
        serializer_class=GuideApplicationSerializer,
        filter_backends=[],
    )
    def apply(self, request):
        serializer = GuideApplicationSerializer(
            data=request.data, context={"request": request}
        )
        serializer.is_valid(raise_exception=True)
        data = dict(serializer.validated_data)
        password = data.pop("password", None)

        try:
            with transaction.atomic():
                if request.user.is_authenticated:
                    applicant = request.user
                else:
                    applicant = get_user_model().objects.create_user(
                        username=generate_username(data["email"]),
                        email=data["email"],
                        password=password,
                        name=data["name"],
                    )
                    mark_verified(applicant)
                application = submit_application(applicant, **data)
        except ApplicationError as exc:
            raise ValidationError({"detail": str(exc)}) from exc
        except IntegrityError as exc:
            # Another sign-up took the email after validation
            raise ValidationError({"email": [_("Email already registered")]}) from exc

        out = GuideApplicationSerializer(application, context={"request": request})
        return Response(
            {
                "detail": _(
                    "Guide application submitted successfully! "
                    "Your application is under review.",
                ),
                "application": out.data,
            },
            status=status.HTTP_201_CREATED,
        )

    @action(
        detail=False,
        permission_classes=[IsAuthenticated],
        serializer_class=GuideApplicationSerializer,
        filter_backends=[],
    )
    def me(self, request):
        application = (
            GuideApplication.objects.filter(applicant=request.user)
            .order_by("-created_at", "-id")
            .first()
        )
        if application is None:
            raise NotFound(_("No guide application found"))
        serializer = GuideApplicationSerializer(
            application, context={"request": request}
        )
        return Response(serializer.data)


@extend_schema_view(
    list=extend_schema(tags=["Guides"]),
    retrieve=extend_schema(tags=["Guides"]),
    review=extend_schema(tags=["Guides"], request=ReviewSerializer),
)
class GuideApplicationAdminViewSet(ListModelMixin, RetrieveModelMixin, GenericViewSet):
    serializer_class = GuideApplicationAdminSerializer
    permission_classes = [IsPlatformAdmin]
    filter_backends = [DjangoFilterBackend]
    filterset_class = GuideApplicationFilter
    queryset = GuideApplication.objects.select_related("applicant", "reviewed_by")

    @action(detail=True, methods=["post"])
    def review(self, request, pk=None):
        application = self.get_object()
        payload = ReviewSerializer(data=request.data)
        payload.is_valid(raise_exception=True)
        try:
            application = review_application(
                application,
                status=payload.validated_data["status"],
                reviewer=request.user,
                admin_notes=payload.validated_data["admin_notes"],
            )
        except ApplicationError as exc:
            raise ValidationError({"detail": str(exc)}) from exc
        logger.info(
            "Guide application %s %s by %s",
            application.pk,
            application.status,
            request.user.pk,
        )
        return Response(self.get_serializer(application).data)
