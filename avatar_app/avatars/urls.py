from django.urls import path

from avatars import views_avatar, views_health

urlpatterns = [
    path("avatars/default/<str:image_format>", views_avatar.avatar_image, name="avatar-default-image"),
    path("avatars/<uuid:avatar_id>/<str:image_format>", views_avatar.avatar_image, name="avatar-image"),
    path("profiles/<str:username>/avatar/", views_avatar.avatar_upload, name="profile-avatar-upload"),
    path("profiles/<str:username>/avatar/delete/", views_avatar.avatar_delete, name="profile-avatar-delete"),
    path("healthz", views_health.healthz, name="healthz"),
    path("readyz", views_health.readyz, name="readyz"),
]
