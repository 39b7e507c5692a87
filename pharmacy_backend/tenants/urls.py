# tenants/urls.py

from django.urls import path

from tenants.views import BranchListView, TaxSettingsView

urlpatterns = [
    path("tax-settings/", TaxSettingsView.as_view(), name="tenant-tax-settings"),
    path("branches/", BranchListView.as_view(), name="tenant-branches"),
]
