from django import forms

from .models import Board, UserPreference
from .timezones import is_valid_timezone

ISO_DATE_FORMATS = ['%Y-%m-%d']


class BoardForm(forms.ModelForm):
    """Create/edit the descriptive fields of a board. Statistics are never editable."""

    class Meta:
        model = Board
        fields = ['name', 'description', 'emoji', 'color', 'unit_type', 'unit', 'target_amount']

    def __init__(self, *args, user=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.user = user
        # Unset fields keep their model defaults on create
        for field_name in ('emoji', 'color', 'unit_type'):
            self.fields[field_name].required = False

    def clean_name(self):
        name = self.cleaned_data['name'].strip()
        owner = self.user or self.instance.user
        duplicates = Board.objects.filter(user=owner, name=name)
        if self.instance.pk:
            duplicates = duplicates.exclude(pk=self.instance.pk)
        if duplicates.exists():
            raise forms.ValidationError('You already have a board with this name.')
        return name

    def clean_color(self):
        color = self.cleaned_data.get('color')
        if not color:
            return self.instance.color or Board._meta.get_field('color').default
        if not (len(color) == 7 and color.startswith('#')):
            raise forms.ValidationError('Use a hex color such as #3B82F6.')
        return color

    def clean_emoji(self):
        return self.cleaned_data.get('emoji') or self.instance.emoji or Board._meta.get_field('emoji').default

    def clean_unit_type(self):
        return self.cleaned_data.get('unit_type') or self.instance.unit_type or 'boolean'


class CheckInForm(forms.Form):
    date = forms.DateField(input_formats=ISO_DATE_FORMATS, required=False)
    amount = forms.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False)
    note = forms.CharField(max_length=500, required=False, empty_value=None)


class CheckInUpdateForm(forms.Form):
    amount = forms.DecimalField(max_digits=10, decimal_places=2, min_value=0, required=False)
    note = forms.CharField(max_length=500, required=False, empty_value=None)


class QuickCheckInForm(CheckInUpdateForm):
    board_id = forms.IntegerField(required=False, min_value=1)
    board_name = forms.CharField(max_length=50, required=False)

    def clean(self):
        cleaned_data = super().clean()
        if not cleaned_data.get('board_id') and not cleaned_data.get('board_name'):
            raise forms.ValidationError('Provide boardId or boardName.')
        return cleaned_data


class CheckInListForm(forms.Form):
    start_date = forms.DateField(input_formats=ISO_DATE_FORMATS, required=False)
    end_date = forms.DateField(input_formats=ISO_DATE_FORMATS, required=False)
    limit = forms.IntegerField(min_value=1, max_value=1000, required=False)


class HeatmapRangeForm(forms.Form):
    """Either a year, or an explicit start/end date pair."""
    year = forms.IntegerField(min_value=1970, max_value=9999, required=False)
    start_date = forms.DateField(input_formats=ISO_DATE_FORMATS, required=False)
    end_date = forms.DateField(input_formats=ISO_DATE_FORMATS, required=False)

    def clean(self):
        cleaned_data = super().clean()
        start_date = cleaned_data.get('start_date')
        end_date = cleaned_data.get('end_date')

        if bool(start_date) != bool(end_date):
            raise forms.ValidationError('startDate and endDate must be given together.')
        if start_date and end_date and start_date > end_date:
            raise forms.ValidationError('startDate must be on or before endDate.')
        return cleaned_data


class UserPreferenceForm(forms.ModelForm):
    class Meta:
        model = UserPreference
        fields = ['timezone']

    def clean_timezone(self):
        tz_name = self.cleaned_data['timezone']
        if not is_valid_timezone(tz_name):
            raise forms.ValidationError(f'Unknown timezone "{tz_name}".')
        return tz_name
