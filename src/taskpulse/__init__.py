"""taskpulse: shows the task whose time window is active now and reminds you before it ends."""
