"""Business logic layer for users app.

Registration, email availability checks and login. Views only parse
requests and render the results returned here.
"""
