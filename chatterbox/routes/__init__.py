from chatterbox.routes import admin, comments, catalog, payment, posts, users

routers = [users.router, posts.router, comments.router, catalog.router, admin.router, payment.router]
