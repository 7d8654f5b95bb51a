from django.urls import path

from clinic.realtime.consumers import SlotUpdatesConsumer

websocket_urlpatterns = [
    path("ws/slots/<int:doctor_id>/<str:day>/", SlotUpdatesConsumer.as_asgi()),
]
