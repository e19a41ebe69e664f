"""Church RSVP - registration workflows for events, home groups and serving"""
