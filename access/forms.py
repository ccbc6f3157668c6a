from django import forms

from .models import ApiKey


class ApiKeyForm(forms.Form):
    name = forms.CharField(max_length=100)
    scopes = forms.MultipleChoiceField(choices=ApiKey.SCOPE_CHOICES, required=False)
    expires_in_days = forms.IntegerField(min_value=1, max_value=3650, required=False)
