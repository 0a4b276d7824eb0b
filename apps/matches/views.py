from rest_framework import viewsets, status, serializers as drf_serializers
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema

from apps.accounts.models import User
from apps.payments.services import (
    toggle_payment_status,
    PaymentsServiceError,
    MatchCancelledError,
    NotConfirmedError,
    ParticipantNotFoundError,
)
from .models import Match
from .permissions import CanManageMatch
from .serializers import (
    MatchSerializer,
    MatchListSerializer,
    MatchFilterSerializer,
    MatchWriteSerializer,
    MatchSummarySerializer,
    ParticipationSerializer,
    ParticipantInputSerializer,
    OutstandingSerializer,
)
from .services import (
    create_match,
    update_match,
    complete_match,
    cancel_match,
    delete_match,
    get_upcoming_matches,
    get_past_matches,
    get_all_matches,
    get_outstanding_summary,
    get_match_summary,
    invite_user,
    confirm_participation,
    decline_participation,
    cancel_participation,
    get_match_participants,
    MatchesServiceError,
    MatchNotFoundError,
    MatchFullError,
    MatchClosedError,
    AlreadyParticipantError,
    NotParticipantError,
    InsufficientPermissionsError,
)


# Response serializers for API documentation
class ErrorResponseSerializer(drf_serializers.Serializer):
    error = drf_serializers.CharField()


ERROR_STATUS = {
    MatchNotFoundError: status.HTTP_404_NOT_FOUND,
    NotParticipantError: status.HTTP_404_NOT_FOUND,
    ParticipantNotFoundError: status.HTTP_404_NOT_FOUND,
    InsufficientPermissionsError: status.HTTP_403_FORBIDDEN,
    MatchFullError: status.HTTP_409_CONFLICT,
    MatchClosedError: status.HTTP_409_CONFLICT,
    MatchCancelledError: status.HTTP_409_CONFLICT,
    AlreadyParticipantError: status.HTTP_409_CONFLICT,
    NotConfirmedError: status.HTTP_400_BAD_REQUEST,
}


def _error_response(error):
    """Translate a service error into the API's {'error': ...} response."""
    code = ERROR_STATUS.get(type(error), status.HTTP_400_BAD_REQUEST)
    return Response({'error': str(error)}, status=code)


class MatchPagination(PageNumberPagination):
    page_size = 20
    page_size_query_param = 'page_size'
    max_page_size = 100


class MatchViewSet(viewsets.ModelViewSet):
    """
    ViewSet for matches and their roster.

    list: Matches by scope (upcoming, past or all)
    create: Create a match owned by the current user
    retrieve: Match with full roster
    update: Edit a match (owner or admin)
    destroy: Delete a match without paid participants (owner or admin)
    """

    queryset = Match.objects.select_related('created_by').prefetch_related('participations__user')
    serializer_class = MatchSerializer
    permission_classes = [IsAuthenticated]
    pagination_class = MatchPagination

    def get_permissions(self):
        if self.action in [
            'update', 'partial_update', 'destroy', 'invite',
            'remove_participant', 'toggle_payment', 'complete', 'cancel_match',
        ]:
            return [IsAuthenticated(), CanManageMatch()]
        return super().get_permissions()

    def get_queryset(self):
        if self.action != 'list':
            return super().get_queryset()

        filter_serializer = MatchFilterSerializer(data=self.request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        scope = filter_serializer.validated_data['scope']

        if scope == 'past':
            return get_past_matches()
        if scope == 'all':
            return get_all_matches()
        return get_upcoming_matches()

    def get_serializer_class(self):
        if self.action == 'list':
            return MatchListSerializer
        return MatchSerializer

    def _target_user(self, request):
        serializer = ParticipantInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return User.objects.get(id=serializer.validated_data['user'])

    def _match_response(self, match_id, status_code=status.HTTP_200_OK):
        match = self.get_queryset().get(id=match_id)
        serializer = MatchSerializer(match, context=self.get_serializer_context())
        return Response(serializer.data, status=status_code)

    @extend_schema(request=MatchWriteSerializer, responses={201: MatchSerializer})
    def create(self, request, *args, **kwargs):
        """
        Create a match; the creator becomes its organizer.

        POST /api/matches/
        """
        serializer = MatchWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            match = create_match(created_by=request.user, **serializer.validated_data)
        except MatchesServiceError as e:
            return _error_response(e)

        return self._match_response(match.id, status.HTTP_201_CREATED)

    @extend_schema(request=MatchWriteSerializer, responses={200: MatchSerializer})
    def update(self, request, *args, **kwargs):
        """
        PUT/PATCH /api/matches/{id}/
        """
        match = self.get_object()
        serializer = MatchWriteSerializer(data=request.data, partial=kwargs.get('partial', False))
        serializer.is_valid(raise_exception=True)

        try:
            update_match(match_id=match.id, user=request.user, **serializer.validated_data)
        except MatchesServiceError as e:
            return _error_response(e)

        return self._match_response(match.id)

    def destroy(self, request, *args, **kwargs):
        """
        DELETE /api/matches/{id}/
        """
        match = self.get_object()

        try:
            delete_match(match_id=match.id, user=request.user)
        except MatchesServiceError as e:
            return _error_response(e)

        return Response(status=status.HTTP_204_NO_CONTENT)

    # -------------------------------------------------------------------------
    # Own participation
    # -------------------------------------------------------------------------

    @extend_schema(request=None, responses={200: ParticipationSerializer, 409: ErrorResponseSerializer})
    @action(detail=True, methods=['post'])
    def confirm(self, request, pk=None):
        """
        Confirm presence.

        POST /api/matches/{id}/confirm/
        """
        match = self.get_object()
        try:
            participation = confirm_participation(match_id=match.id, user=request.user)
        except MatchesServiceError as e:
            return _error_response(e)

        return Response(ParticipationSerializer(participation).data)

    @extend_schema(request=None, responses={200: ParticipationSerializer})
    @action(detail=True, methods=['post'])
    def decline(self, request, pk=None):
        """
        Decline presence; a paid fee goes back to the player's credits.

        POST /api/matches/{id}/decline/
        """
        match = self.get_object()
        try:
            participation = decline_participation(match_id=match.id, user=request.user)
        except MatchesServiceError as e:
            return _error_response(e)

        return Response(ParticipationSerializer(participation).data)

    @extend_schema(request=None, responses={204: None})
    @action(detail=True, methods=['post'])
    def cancel(self, request, pk=None):
        """
        Leave the roster entirely.

        POST /api/matches/{id}/cancel/
        """
        match = self.get_object()
        try:
            cancel_participation(match_id=match.id, user=request.user, cancelled_by=request.user)
        except MatchesServiceError as e:
            return _error_response(e)

        return Response(status=status.HTTP_204_NO_CONTENT)

    # -------------------------------------------------------------------------
    # Organizer actions
    # -------------------------------------------------------------------------

    @extend_schema(request=ParticipantInputSerializer, responses={201: ParticipationSerializer})
    @action(detail=True, methods=['post'])
    def invite(self, request, pk=None):
        """
        Invite a player (pending until they answer).

        POST /api/matches/{id}/invite/
        Body: {"user": "<uuid>"}
        """
        match = self.get_object()
        try:
            target = self._target_user(request)
        except User.DoesNotExist:
            return Response({'error': 'Usuário não encontrado.'}, status=status.HTTP_404_NOT_FOUND)

        try:
            participation = invite_user(match_id=match.id, user=target, invited_by=request.user)
        except MatchesServiceError as e:
            return _error_response(e)

        return Response(ParticipationSerializer(participation).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=ParticipantInputSerializer, responses={204: None})
    @action(detail=True, methods=['post'])
    def remove_participant(self, request, pk=None):
        """
        POST /api/matches/{id}/remove_participant/
        Body: {"user": "<uuid>"}
        """
        match = self.get_object()
        try:
            target = self._target_user(request)
        except User.DoesNotExist:
            return Response({'error': 'Usuário não encontrado.'}, status=status.HTTP_404_NOT_FOUND)

        try:
            cancel_participation(match_id=match.id, user=target, cancelled_by=request.user)
        except MatchesServiceError as e:
            return _error_response(e)

        return Response(status=status.HTTP_204_NO_CONTENT)

    @extend_schema(request=ParticipantInputSerializer, responses={200: ParticipationSerializer})
    @action(detail=True, methods=['post'])
    def toggle_payment(self, request, pk=None):
        """
        Flip a participant's paid flag and settle the fee against their credits.

        POST /api/matches/{id}/toggle_payment/
        Body: {"user": "<uuid>"}
        """
        match = self.get_object()
        serializer = ParticipantInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            participation = toggle_payment_status(
                match_id=match.id,
                user_id=serializer.validated_data['user'],
                toggled_by=request.user,
            )
        except PaymentsServiceError as e:
            return _error_response(e)

        return Response(ParticipationSerializer(participation).data)

    @extend_schema(request=None, responses={200: MatchSerializer})
    @action(detail=True, methods=['post'])
    def complete(self, request, pk=None):
        """
        POST /api/matches/{id}/complete/
        """
        match = self.get_object()
        try:
            complete_match(match_id=match.id, user=request.user)
        except MatchesServiceError as e:
            return _error_response(e)

        return self._match_response(match.id)

    @extend_schema(request=None, responses={200: MatchSerializer})
    @action(detail=True, methods=['post'])
    def cancel_match(self, request, pk=None):
        """
        Call off a match and refund every paid fee.

        POST /api/matches/{id}/cancel_match/
        """
        match = self.get_object()
        try:
            cancel_match(match_id=match.id, user=request.user)
        except MatchesServiceError as e:
            return _error_response(e)

        return self._match_response(match.id)

    # -------------------------------------------------------------------------
    # Read-only views
    # -------------------------------------------------------------------------

    @extend_schema(responses={200: ParticipationSerializer(many=True)})
    @action(detail=True, methods=['get'])
    def participants(self, request, pk=None):
        """
        GET /api/matches/{id}/participants/
        """
        match = self.get_object()
        participations = get_match_participants(match_id=match.id)
        return Response(ParticipationSerializer(participations, many=True).data)

    @extend_schema(responses={200: MatchSummarySerializer})
    @action(detail=True, methods=['get'])
    def summary(self, request, pk=None):
        """
        Roster grouped by status with collected and expected amounts.

        GET /api/matches/{id}/summary/
        """
        match = self.get_object()
        summary = get_match_summary(match_id=match.id)
        serializer = MatchSummarySerializer(summary, context=self.get_serializer_context())
        return Response(serializer.data)

    @extend_schema(responses={200: OutstandingSerializer})
    @action(detail=False, methods=['get'])
    def pending(self, request):
        """
        Matches the current user played but hasn't paid, with the total owed.

        GET /api/matches/pending/
        """
        summary = get_outstanding_summary(user=request.user)
        serializer = OutstandingSerializer(summary, context=self.get_serializer_context())
        return Response(serializer.data)
