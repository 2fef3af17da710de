"""HRM core package.

Compensation, time accounting, KPI reviews and leave requests, organized by
feature modules with a thin Flask controller layer over service/repository
layers. Employee master data lives in the external employee service.
"""
