from django.contrib import admin
from .models import Appointment, Customer, PhoneVerification

@admin.register(Appointment)
class AppointmentAdmin(admin.ModelAdmin):
    # table columns
    list_display = ("date", "time", "name", "phone", "service", "status", "created_at")
    list_display_links = ("date", "time", "name")

    # right sidebar filters
    list_filter = ("status", "service", "date")

    # top search bar
    search_fields = ("name", "phone", "email", "customer_uid")

    # date drilldown nav
    date_hierarchy = "date"

    list_per_page = 25

    readonly_fields = ("id", "created_at")

    fieldsets = (
        ("Customer", {"fields": ("name", "phone", "email")}),
        ("Booking", {"fields": ("date", "time", "service", "status")}),
        ("Signed-in customer", {"fields": ("customer_uid", "customer_email", "customer_phone")}),
        ("Meta", {"fields": ("id", "created_at")}),
    )


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ("phone", "display_name", "email", "phone_verified", "created_at")
    search_fields = ("phone", "display_name", "email")
    readonly_fields = ("uid", "created_at", "updated_at")


@admin.register(PhoneVerification)
class PhoneVerificationAdmin(admin.ModelAdmin):
    list_display = ("phone", "created_at", "expires_at", "attempts", "verified_at")
    search_fields = ("phone",)
    # code hashes are never edited by hand
    readonly_fields = ("id", "phone", "code_hash", "created_at", "expires_at", "attempts", "verified_at")
