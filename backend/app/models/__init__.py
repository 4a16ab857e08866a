# Models module
from app.models.client import (
    ClientInput, ClientRecord, DeleteResponse, DeletedClient,
    Fees, Goal, Height, MedicalCondition, Membership, PTTier,
)
