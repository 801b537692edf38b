from django import forms
from django.contrib.auth import authenticate, get_user_model
from django.contrib.auth.password_validation import validate_password

User = get_user_model()


class _AccountForm(forms.Form):
    email = forms.EmailField(label='Email address')
    password = forms.CharField(label='Password', widget=forms.PasswordInput)

    def __init__(self, *args, request=None, **kwargs):
        self.request = request
        super().__init__(*args, **kwargs)
        for name in self.fields:
            self.fields[name].widget.attrs.setdefault('class', 'form-control')
        self.fields['email'].widget.attrs.setdefault('autocomplete', 'email')

    def clean_email(self):
        return self.cleaned_data['email'].strip().lower()


class SignInForm(_AccountForm):
    """Email + password; cleaned_data['user'] is the authenticated user."""

    def clean(self):
        data = super().clean()
        email, password = data.get('email'), data.get('password')
        if email and password:
            user = authenticate(self.request, username=email, password=password)
            if user is None:
                raise forms.ValidationError('Invalid email or password.')
            data['user'] = user
        return data


class SignUpForm(_AccountForm):
    """Creates an account whose username is the email address."""

    def clean_email(self):
        email = super().clean_email()
        if User.objects.filter(username__iexact=email).exists():
            raise forms.ValidationError('An account with this email already exists.')
        return email

    def clean_password(self):
        password = self.cleaned_data.get('password')
        validate_password(password)
        return password

    def save(self):
        email = self.cleaned_data['email']
        return User.objects.create_user(username=email, email=email, password=self.cleaned_data['password'])
