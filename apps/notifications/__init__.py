"""Notifications app package.

Sends applicant emails (submitted / approved / rejected) through an
external transactional-mail API. Emails are dispatched by Celery tasks
scheduled after the booking change has committed.
"""
