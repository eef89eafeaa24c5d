"""
===========================================================
ORM Models for Employees and Salary Auditing
===========================================================

SQLAlchemy ORM model definitions for the payroll tables.

Models:
    Employee: Mutable employee record (id, name, salary, department)
    SalaryAuditLog: Append-only history of salary changes

Architecture:
    - Kept apart from the store and audit logic so setup/ can create tables
      without importing the data-access layer
    - salary_audit_log.employee_id deliberately has no foreign key: audit
      rows must outlive whatever happens to the employee row

Example:
    >>> from models.payroll_models import Base, Employee
    >>>
    >>> Base.metadata.create_all(engine)
    >>> session.add(Employee(name='John Doe', salary=Decimal('50000.00'), department='IT'))
"""

from sqlalchemy import Column, DateTime, Index, Integer, Numeric, String
from sqlalchemy.orm import declarative_base

# NUMERIC(10, 2) used for every salary column
SALARY_PRECISION = 10
SALARY_SCALE = 2

Base = declarative_base()


class Employee(Base):
    """Employee master record.

    Salary is only ever changed through EmployeeStore.set_salary, which
    writes the matching SalaryAuditLog row in the same transaction.

    Attributes:
        id: Unique identifier, assigned on insert
        name: Employee name
        salary: Current salary, two decimal places
        department: Optional department label
    """
    __tablename__ = 'employees'
    __table_args__ = (
        Index('idx_employees_department', 'department'),
        {'comment': 'Stores employee information.'},
    )

    id = Column(Integer, primary_key=True, autoincrement=True,
                comment='Unique identifier for the employee.')
    name = Column(String(100), nullable=False,
                  comment='Full name of the employee.')
    salary = Column(Numeric(SALARY_PRECISION, SALARY_SCALE), nullable=False,
                    comment='Current salary of the employee.')
    department = Column(String(50),
                        comment='Department the employee belongs to.')

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'salary': self.salary,
            'department': self.department
        }

    def __repr__(self) -> str:
        return f"<Employee id={self.id} name={self.name!r} salary={self.salary}>"


class SalaryAuditLog(Base):
    """Salary change audit table.

    One row per salary-changing update. Rows are never updated or deleted.

    Attributes:
        log_id: Sequential identifier, reflects insertion order
        employee_id: Employee whose salary changed
        old_salary: Salary before the change
        new_salary: Salary after the change
        change_date: When the change was logged (UTC)
    """
    __tablename__ = 'salary_audit_log'
    __table_args__ = (
        Index('idx_salary_audit_log_employee_id', 'employee_id'),
        {'comment': 'Logs changes to employee salaries.'},
    )

    log_id = Column(Integer, primary_key=True, autoincrement=True,
                    comment='Unique identifier for each audit entry.')
    employee_id = Column(Integer, nullable=False,
                         comment='ID of the employee whose salary changed.')
    old_salary = Column(Numeric(SALARY_PRECISION, SALARY_SCALE),
                        comment='Salary before the change.')
    new_salary = Column(Numeric(SALARY_PRECISION, SALARY_SCALE), nullable=False,
                        comment='Salary after the change.')
    change_date = Column(DateTime(timezone=True), nullable=False,
                         comment='Timestamp of when the salary change was logged.')

    def to_dict(self) -> dict:
        return {
            'log_id': self.log_id,
            'employee_id': self.employee_id,
            'old_salary': self.old_salary,
            'new_salary': self.new_salary,
            'change_date': self.change_date
        }
