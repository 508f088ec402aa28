"""Landmark-driven planning of total-knee-arthroplasty resection planes."""
