from decimal import Decimal

from django import forms
from projects.models import Project
from .models import TimeEntry

MIN_HOURS = Decimal('0.5')


class TimeEntryForm(forms.ModelForm):
    class Meta:
        model = TimeEntry
        fields = ('project', 'hours', 'description')

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.fields['project'].required = True
        self.fields['project'].queryset = Project.objects.all()
        self.fields['project'].empty_label = 'Select a project'
        self.fields['hours'].widget.attrs.update({'min': str(MIN_HOURS), 'step': '0.5'})
        self.fields['description'].widget = forms.TextInput()
        for name in self.fields:
            self.fields[name].widget.attrs.setdefault('class', 'form-control')

    def clean_hours(self):
        value = self.cleaned_data.get('hours')
        if value is not None and value < MIN_HOURS:
            raise forms.ValidationError(f'Log at least {MIN_HOURS} hours.')
        return value

    def clean_description(self):
        value = (self.cleaned_data.get('description') or '').strip()
        if not value:
            raise forms.ValidationError('Describe the work.')
        return value
