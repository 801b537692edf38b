import logging

from django.shortcuts import redirect, render
from django.contrib import messages
from django.contrib.auth import login
from django.utils.http import url_has_allowed_host_and_scheme
from django.views import View

from .forms import SignInForm, SignUpForm
from .identity import RequestIdentity

logger = logging.getLogger(__name__)

MODE_SIGN_IN = 'signin'
MODE_SIGN_UP = 'signup'


class LoginView(View):
    """Sign in, or create an account when mode=signup."""
    template_name = 'core/login.html'

    def get_mode(self):
        mode = self.request.POST.get('mode') or self.request.GET.get('mode')
        return MODE_SIGN_UP if mode == MODE_SIGN_UP else MODE_SIGN_IN

    def get_form_class(self, mode):
        return SignUpForm if mode == MODE_SIGN_UP else SignInForm

    def get_success_url(self):
        next_url = self.request.POST.get('next') or self.request.GET.get('next')
        if next_url and url_has_allowed_host_and_scheme(next_url, allowed_hosts={self.request.get_host()}):
            return next_url
        return 'dashboard'

    def get(self, request):
        if RequestIdentity(request).current_user() is not None:
            return redirect('dashboard')
        mode = self.get_mode()
        form = self.get_form_class(mode)(request=request)
        return self.render_form(form, mode)

    def post(self, request):
        mode = self.get_mode()
        form = self.get_form_class(mode)(request.POST, request=request)
        if not form.is_valid():
            return self.render_form(form, mode)
        if mode == MODE_SIGN_UP:
            user = form.save()
            logger.info('Account created for %s', user.get_username())
            messages.success(request, 'Account created.')
        else:
            user = form.cleaned_data['user']
        login(request, user, backend='django.contrib.auth.backends.ModelBackend')
        logger.info('User %s signed in', user.get_username())
        return redirect(self.get_success_url())

    def render_form(self, form, mode):
        return render(self.request, self.template_name, {
            'form': form,
            'mode': mode,
            'is_sign_up': mode == MODE_SIGN_UP,
            'next': self.request.POST.get('next') or self.request.GET.get('next', ''),
        })


class LogoutView(View):
    """Ends the session through the request identity. POST only."""
    http_method_names = ['post']

    def post(self, request):
        RequestIdentity(request).sign_out()
        messages.info(request, 'Signed out.')
        return redirect('login')
