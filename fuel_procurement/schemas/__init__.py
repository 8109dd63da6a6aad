from fuel_procurement.schemas.boq import BoqCreate, BoqUpdate, BoqOut, BoqList
from fuel_procurement.schemas.bids import BidSubmit, BidOut, BidList, BidAdminRow, BidAdminList
from fuel_procurement.schemas.evaluation import EvaluateRequest, EvaluationOut, SelectRequest, SelectionOut
from fuel_procurement.schemas.suppliers import SupplierProfileIn, SupplierProfileOut, SupplierList
from fuel_procurement.schemas.budgets import BudgetSet, BudgetOut
from fuel_procurement.schemas.branches import BranchCreate, BranchOut, BranchList
