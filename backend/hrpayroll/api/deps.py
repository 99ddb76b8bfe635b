from fastapi import Header

from hrpayroll.core.logging import bind_company


def get_company_id(x_company_id: int = Header(..., alias="X-Company-ID", gt=0)) -> int:
    bind_company(x_company_id)
    return x_company_id
