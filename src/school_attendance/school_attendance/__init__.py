"""School attendance package.

Feature modules (attendance, notifications, stats) follow the same
model / repository / service layering, with a thin Flask controller
layer on top. The attendance posting path is the correctness boundary;
notification delivery is a best-effort side channel.
"""
