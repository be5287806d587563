"""Users app package.

Staff authentication for the booking review API. Administrators are
regular ``django.contrib.auth`` users with ``is_staff`` set; they log in
with username or email and receive a JWT pair.
"""
