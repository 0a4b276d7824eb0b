from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'matches'

router = DefaultRouter()
router.register(r'', views.MatchViewSet, basename='match')

urlpatterns = [
    # GET    /api/matches/?scope=upcoming|past|all  - List matches
    # POST   /api/matches/                          - Create match
    # GET    /api/matches/{id}/                     - Match with roster
    # PUT    /api/matches/{id}/                     - Update match
    # PATCH  /api/matches/{id}/                     - Partial update
    # DELETE /api/matches/{id}/                     - Delete match

    # Participation
    # POST   /api/matches/{id}/confirm/             - Confirm presence
    # POST   /api/matches/{id}/decline/             - Decline
    # POST   /api/matches/{id}/cancel/              - Leave roster

    # Organizer
    # POST   /api/matches/{id}/invite/              - Invite player
    # POST   /api/matches/{id}/remove_participant/  - Remove player
    # POST   /api/matches/{id}/toggle_payment/      - Flip paid flag
    # POST   /api/matches/{id}/complete/            - Mark as played
    # POST   /api/matches/{id}/cancel_match/        - Call off and refund

    # GET    /api/matches/{id}/participants/        - Roster
    # GET    /api/matches/{id}/summary/             - Money overview
    # GET    /api/matches/pending/                  - My unpaid matches

    path('', include(router.urls)),
]
