from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from .models import Profile, User


class ProfileInline(admin.StackedInline):
    model = Profile
    can_delete = False
    fields = ('is_admin',)


class UserAdmin(BaseUserAdmin):
    list_display = ("email", "first_name", "is_active", "is_staff", "checklist_admin")
    list_filter = ("is_active", "is_staff", "profile__is_admin")
    search_fields = ("email", "first_name", "last_name")
    ordering = ("email",)
    inlines = [ProfileInline]

    add_fieldsets = (
        (None, {
            "classes": ("wide",),
            "fields": ("email", "username", "password1", "password2"),
        }),
    )

    def checklist_admin(self, obj):
        profile = getattr(obj, "profile", None)
        return bool(profile and profile.is_admin)
    checklist_admin.boolean = True
    checklist_admin.short_description = "Checklist admin"


admin.site.register(User, UserAdmin)
